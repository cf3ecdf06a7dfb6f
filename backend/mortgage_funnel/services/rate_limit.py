"""Daily per-IP submission limit for the landing create endpoint.

The counter key is `<client ip>_<date>`. The count is incremented before
the submission is validated, so rejected submissions still use up quota.

Backends (settings.submission_counter_backend):
  memory  process-local dict. Correct only while the API runs as a single
          process; every worker would otherwise keep its own count.
  redis   shared INCR counter that expires after two days. If Redis is
          unreachable the submission is allowed and the failure logged.
"""

import logging
from datetime import date, timedelta
from typing import Callable

from fastapi import Request
from redis.exceptions import RedisError

from mortgage_funnel.config import settings
from mortgage_funnel.middleware.exceptions import SubmissionLimitError
from mortgage_funnel.utils.cache import get_redis

logger = logging.getLogger(__name__)

REDIS_KEY_PREFIX = "landing:submissions"
KEY_TTL_SECONDS = 2 * 24 * 60 * 60


def client_ip(request: Request) -> str:
    """Client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class SubmissionLimiter:
    def __init__(
        self,
        limit: int | None = None,
        backend: str | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.limit = limit if limit is not None else settings.max_form_submissions_per_ip
        self.backend = backend or settings.submission_counter_backend
        if self.backend not in ("memory", "redis"):
            raise ValueError(f"Unknown submission counter backend: {self.backend}")
        self.today = today
        self._counts: dict[str, int] = {}

    def _key(self, ip: str, day: date) -> str:
        return f"{ip}_{day.isoformat()}"

    async def check(self, ip: str) -> None:
        """Count one submission for `ip`. Raises SubmissionLimitError when over the limit."""
        if self.backend == "redis":
            allowed = await self._check_redis(ip)
        else:
            allowed = self._check_memory(ip)

        if not allowed:
            logger.warning(f"Daily submission limit reached for {ip}")
            raise SubmissionLimitError()

    def _check_memory(self, ip: str) -> bool:
        day = self.today()
        key = self._key(ip, day)
        current = self._counts.get(key, 0)
        if current >= self.limit:
            return False
        self._counts[key] = current + 1
        self._prune(day)
        return True

    def _prune(self, day: date) -> None:
        cutoff = (day - timedelta(days=2)).isoformat()
        stale = [k for k in self._counts if k.rsplit("_", 1)[1] <= cutoff]
        for key in stale:
            del self._counts[key]

    async def _check_redis(self, ip: str) -> bool:
        key = f"{REDIS_KEY_PREFIX}:{self._key(ip, self.today())}"
        try:
            client = await get_redis()
            count = await client.incr(key)
            if count == 1:
                await client.expire(key, KEY_TTL_SECONDS)
        except RedisError as e:
            logger.error(f"Submission counter unavailable, allowing request: {e}")
            return True
        return count <= self.limit

    def count(self, ip: str) -> int:
        """Current in-memory count for today (memory backend only)."""
        return self._counts.get(self._key(ip, self.today()), 0)

    def reset(self) -> None:
        self._counts.clear()


_limiter: SubmissionLimiter | None = None


def get_submission_limiter() -> SubmissionLimiter:
    global _limiter
    if _limiter is None:
        _limiter = SubmissionLimiter()
    return _limiter
