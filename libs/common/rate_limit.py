"""Rate limiting for the storefront API (slowapi).

Limits are counted per signed-in user when the auth dependency has resolved
one, otherwise per client IP. Counters live in Redis so every instance shares
them; tests and single-process setups point RATE_LIMIT_STORAGE_URI at
``memory://``.
"""

from functools import lru_cache

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def rate_limit_key(request: Request) -> str:
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.user_id}"
    return f"ip:{_client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=rate_limit_key,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI or settings.REDIS_URL,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()

# Endpoints using this need a ``request: Request`` parameter.
payment_limit = limiter.limit(get_settings().PAYMENT_RATE_LIMIT)


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        extra={
            "extra_fields": {
                "key": rate_limit_key(request),
                "limit": str(exc.detail),
            }
        },
    )
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests", "limit": str(exc.detail)},
        headers={"Retry-After": "60"},
    )
