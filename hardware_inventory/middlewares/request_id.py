from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("hardware_inventory.request")

# Asset fetches would drown out the interesting lines at INFO.
QUIET_PREFIXES = ("/static", "/metrics", "/health")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id and log how it went."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid4())
        token = request_id_ctx_var.set(request_id)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers[self.header_name] = request_id
            response.headers.setdefault("X-Response-Time", f"{duration_ms:.2f}ms")
            path = request.url.path
            level = logging.DEBUG if path.startswith(QUIET_PREFIXES) else logging.INFO
            logger.log(
                level,
                "request.completed",
                extra={
                    "extra_data": {
                        "method": request.method,
                        "path": path,
                        "status": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                    }
                },
            )
            return response
        finally:
            request_id_ctx_var.reset(token)
