from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("notes_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request: method, path, status and duration.

    5xx responses log at ERROR, 4xx at WARNING, everything else at INFO.
    Request bodies are never logged.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The outer error handler turns this into a 500
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error("%s %s %d %.1fms", request.method, request.url.path, 500, duration_ms)
            raise
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(level, "%s %s %d %.1fms", request.method, request.url.path, status, duration_ms)
        return response
