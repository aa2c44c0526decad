"""Rate limiting for credential endpoints."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from ideaportal.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return the portal's error shape; Retry-After is the window length in seconds."""
    return JSONResponse(
        status_code=429,
        content={"ok": False, "error": "too_many_requests"},
        headers={"Retry-After": str(exc.limit.limit.get_expiry())},
    )
