"""Request logging with a per-request correlation id."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("selfiq.requests")

CORRELATION_HEADER = "X-Correlation-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and logs method, path, status and latency.

    An incoming ``X-Correlation-ID`` is reused so a client can stitch its own
    logs to ours; otherwise a fresh uuid4 is generated. The id is stored on
    ``request.state.correlation_id`` for the exception handlers and echoed
    back in the response headers.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        start = time.time()
        logger.info(f"[{correlation_id}] {request.method} {request.url.path} started")
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = round((time.time() - start) * 1000, 2)
            logger.exception(f"[{correlation_id}] {request.method} {request.url.path} failed after {elapsed_ms}ms")
            raise
        elapsed_ms = round((time.time() - start) * 1000, 2)
        logger.info(
            f"[{correlation_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)"
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
