"""Fixed-window rate limiting for the order submission endpoint.

Redis INCR + EXPIRE per client IP; key "ratelimit:{ip}:orders". Over the
limit the request gets a 429 ApiResponse with a Retry-After header. When
Redis is unreachable the request passes through (fail open): order
submission must not depend on the limiter's store.
"""

import logging
from collections.abc import Awaitable, Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.pm_common.errors import RateLimitError
from src.pm_common.redis_client import get_redis
from src.pm_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
_LIMITED_PATH = "/api/v1/orders"


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int | None = None,
        redis_getter: Callable[[], Awaitable[Redis]] | None = None,
    ) -> None:
        super().__init__(app)
        self._limit = limit if limit is not None else settings.ORDER_RATE_LIMIT_PER_MINUTE
        self._redis_getter = redis_getter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "POST" or request.url.path.rstrip("/") != _LIMITED_PATH:
            return await call_next(request)

        key = f"ratelimit:{client_ip(request)}:orders"
        try:
            redis = await (self._redis_getter or get_redis)()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS)
        except (RedisError, OSError) as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
