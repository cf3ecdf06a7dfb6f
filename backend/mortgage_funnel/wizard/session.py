"""Session Tracker: one progress record per flow attempt.

Record (JSON under SESSION_KEY):
  {"id", "startTime", "currentStep", "isValid", "lastUpdated"}
Timestamps are epoch milliseconds.

Rules:
  - currentStep only ever increases (update() is a ratchet)
  - a record expires SESSION_TIMEOUT after startTime; expiry is checked
    lazily by callers, never by a timer
  - clear() removes the record and every answer key in the catalogue
"""

import json
import logging
import random
import string
import time
from typing import Callable

from mortgage_funnel.fields import ANSWER_KEYS
from mortgage_funnel.wizard.store import SessionStore, delete_many

logger = logging.getLogger(__name__)

SESSION_KEY = "landingSession"
PENDING_SUBMISSION_KEY = "pendingSubmission"

SESSION_TIMEOUT_MS = 30 * 60 * 1000
EXPIRY_WARNING_MS = 5 * 60 * 1000

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _epoch_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class SessionTracker:
    """Create, ratchet, expire and clear the wizard's progress record."""

    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], float] = time.time,
        timeout_ms: int = SESSION_TIMEOUT_MS,
    ):
        self.store = store
        self.clock = clock
        self.timeout_ms = timeout_ms

    # ── Record access ────────────────────────────────────────

    def load(self) -> dict | None:
        """Return the raw record. Raises ValueError if it is unparseable."""
        raw = self.store.get(SESSION_KEY)
        if raw is None:
            return None
        record = json.loads(raw)
        if record is not None and not isinstance(record, dict):
            raise ValueError("Session record is not an object")
        return record

    def _save(self, record: dict) -> None:
        self.store.set(SESSION_KEY, json.dumps(record))

    def now_ms(self) -> int:
        return _epoch_ms(self.clock)

    # ── Operations ───────────────────────────────────────────

    def create(self) -> str:
        now = self.now_ms()
        suffix = "".join(random.choices(_ID_ALPHABET, k=9))
        session_id = f"landing_{now}_{suffix}"
        self._save({
            "id": session_id,
            "startTime": now,
            "currentStep": 0,
            "isValid": True,
        })
        logger.info(f"New landing session created: {session_id}")
        return session_id

    def update(self, step: int) -> None:
        """Raise currentStep to `step` if higher. No-op without a valid session."""
        try:
            record = self.load()
            if record and record.get("isValid"):
                record["currentStep"] = max(int(record.get("currentStep", 0)), step)
                record["lastUpdated"] = self.now_ms()
                self._save(record)
        except (ValueError, TypeError) as e:
            logger.error(f"Error updating landing session: {e}")

    def age_ms(self, record: dict) -> int:
        return self.now_ms() - int(record["startTime"])

    def is_expired(self, record: dict | None = None) -> bool:
        if record is None:
            record = self.load()
        if not record:
            return True
        return self.age_ms(record) > self.timeout_ms

    def clear(self) -> None:
        """Remove the session record and every stored answer."""
        self.store.delete(SESSION_KEY)
        delete_many(self.store, ANSWER_KEYS)

    # ── Convenience ──────────────────────────────────────────

    def recover(self) -> dict | None:
        """Return the record if it is still valid and unexpired."""
        try:
            record = self.load()
            if record and record.get("isValid") and not self.is_expired(record):
                return record
        except (ValueError, TypeError, KeyError) as e:
            logger.error(f"Session recovery error: {e}")
        return None

    def has_active(self) -> bool:
        try:
            record = self.load()
            if not record or not record.get("isValid"):
                return False
            if self.is_expired(record):
                self.clear()
                return False
            return True
        except (ValueError, TypeError, KeyError):
            return False

    def minutes_remaining(self) -> int | None:
        """Minutes left when the session is close to expiry, otherwise None."""
        try:
            record = self.load()
            if record:
                time_left = self.timeout_ms - self.age_ms(record)
                if time_left < EXPIRY_WARNING_MS:
                    return -(-time_left // 60000)  # ceil
        except (ValueError, TypeError, KeyError):
            pass
        return None

    def current_step(self) -> int:
        try:
            record = self.load()
            return int((record or {}).get("currentStep") or 0)
        except (ValueError, TypeError):
            return 0
