"""FastAPI dependencies for mortgage admin authentication.

The token is read from the Authorization bearer header, falling back to
the `mortgageAdminToken` cookie set by the admin dashboard.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mortgage_funnel.auth.jwt import ADMIN_ROLE, TokenExpiredError, TokenInvalidError, decode_token
from mortgage_funnel.middleware.exceptions import AuthenticationError, PermissionDeniedError

ADMIN_TOKEN_COOKIE = "mortgageAdminToken"

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Return the decoded token claims of an authenticated admin."""
    token = credentials.credentials if credentials else request.cookies.get(ADMIN_TOKEN_COOKIE)
    if not token:
        raise AuthenticationError("Access denied. No authentication token provided.")

    try:
        payload = decode_token(token)
    except TokenExpiredError:
        raise AuthenticationError("Authentication token has expired.")
    except TokenInvalidError:
        raise AuthenticationError("Invalid authentication token.")

    if payload.get("role") != ADMIN_ROLE:
        raise PermissionDeniedError("Access denied. Insufficient permissions.")

    return payload
