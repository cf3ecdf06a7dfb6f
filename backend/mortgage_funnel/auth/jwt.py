"""Admin JWT creation and decoding.

Token claims:
  - userId:  admin identifier
  - role:    "admin"
  - exp:     expiry timestamp (24h by default)
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from mortgage_funnel.config import settings

ALGORITHM = settings.jwt_algorithm
ADMIN_ROLE = "admin"


class TokenExpiredError(Exception):
    pass


class TokenInvalidError(Exception):
    pass


def create_admin_token(
    user_id: str,
    role: str = ADMIN_ROLE,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.admin_token_expire_hours)
    )
    payload = {
        "userId": user_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT.

    Raises TokenExpiredError or TokenInvalidError so callers can tell
    the two apart.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except JWTError as e:
        raise TokenInvalidError(str(e)) from e
