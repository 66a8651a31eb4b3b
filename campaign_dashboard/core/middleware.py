"""Per-request id, timing and access logging."""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Read by logging_config.RequestIdFilter so service logs carry the id too
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

QUIET_PATHS = frozenset({"/api/health", "/api/health/ready"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id (honouring an incoming X-Request-ID) and log its outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        response.headers["X-Request-ID"] = request_id

        path = request.url.path
        level = logging.DEBUG if path in QUIET_PATHS else _level_for(response.status_code)
        logger.log(
            level,
            "%s %s -> %s",
            request.method,
            path,
            response.status_code,
            extra={
                "request_id": request_id,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
