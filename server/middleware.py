"""HTTP middleware for request/response logging."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Slow request threshold in milliseconds
SLOW_REQUEST_THRESHOLD_MS = 1000

EVENT_STREAM_MEDIA_TYPE = "text/event-stream"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with its status and duration.

    For event streams the duration covers the time until the stream opened,
    not the whole response, so they are never reported as slow.

    Log levels:
    - DEBUG: Request start
    - INFO: Successful responses and opened streams
    - WARNING: 4xx errors, slow requests (>1s)
    - ERROR: 5xx errors
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        logger.debug("%s %s", request.method, request.url.path)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._log_response(request, response, duration_ms)
        return response

    def _log_response(
        self, request: Request, response: Response, duration_ms: float
    ) -> None:
        method = request.method
        path = request.url.path
        status = response.status_code
        content_type = response.headers.get("content-type", "")

        if status >= 500:
            logger.error("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
        elif status >= 400:
            logger.warning("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
        elif content_type.startswith(EVENT_STREAM_MEDIA_TYPE):
            logger.info("%s %s -> %d stream opened (%.1fms)", method, path, status, duration_ms)
        elif duration_ms > SLOW_REQUEST_THRESHOLD_MS:
            logger.warning("%s %s -> %d (%.1fms) SLOW", method, path, status, duration_ms)
        else:
            logger.info("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
