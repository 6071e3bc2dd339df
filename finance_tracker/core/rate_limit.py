"""
Per-client request limits.

Limits only apply in production, and ``RATE_LIMIT_DISABLE=1`` switches them
off there too. Clients are keyed by remote address.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from finance_tracker.core.config import Settings, settings

AUTH_LIMIT_MESSAGE = "Too many authentication attempts, please try again later"
LIMIT_MESSAGE = "Too many requests, please try again later"


def rate_limiting_enabled(config: Settings) -> bool:
    return config.ENVIRONMENT == "production" and not config.RATE_LIMIT_DISABLE


limiter = Limiter(
    key_func=get_remote_address,
    enabled=rate_limiting_enabled(settings),
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"detail": exc.detail})
