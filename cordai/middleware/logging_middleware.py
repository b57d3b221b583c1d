"""
HTTP request logging middleware.

Binds a request id (and the caller's wallet, when the query names one) into
structlog contextvars so relay and provider logs carry them, then logs one
line per request.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

QUIET_PATHS = frozenset({"/healthz"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing and status info.

    For streamed responses the logged duration covers time to first byte;
    the relay logs stream completion itself. Health checks log at DEBUG.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        user_id = request.query_params.get("userId")
        if user_id:
            structlog.contextvars.bind_contextvars(user_id=user_id)

        start = time.perf_counter()
        status_code = 500
        streamed = False

        try:
            response = await call_next(request)
            status_code = response.status_code
            streamed = response.headers.get("content-type", "").startswith("text/event-stream") or (
                "x-vercel-ai-data-stream" in response.headers
            )
            response.headers["x-request-id"] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            elif request.url.path in QUIET_PATHS:
                log = logger.debug
            else:
                log = logger.info

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=duration_ms,
                streamed=streamed,
                client=request.client.host if request.client else None,
            )
