"""Request logging middleware.

One line per HTTP request: method, path, status, latency, client address and
a short request id. Requests over SLOW_REQUEST_MS (usually a cold snapshot
sync or a slow exchange round trip) are logged at WARNING instead of INFO.

Log format:
    INFO [POST] /api/v1/orders → 201 (23ms) 10.0.0.7 req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from config.settings import settings
from src.pm_gateway.middleware.rate_limit import client_ip

logger = logging.getLogger("pm.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, slow_ms: int | None = None) -> None:
        super().__init__(app)
        self._slow_ms = slow_ms if slow_ms is not None else settings.SLOW_REQUEST_MS

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        level = logging.WARNING if elapsed_ms >= self._slow_ms else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client_ip(request),
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response
