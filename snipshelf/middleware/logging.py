"""
SnipShelf Backend — Request Logging Middleware
================================================

What:  One access-log line per action call.
How:   Measures wall time around the downstream app, then logs method, path,
       status, duration, request id and the authenticated user id at a level
       derived from the status code.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, client IP, request ID, user ID
    ❌ Don't log: request bodies (snippet content may hold secrets), auth headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipshelf.middleware.authentication import user_id_var
from snipshelf.middleware.request_id import request_id_var

logger = logging.getLogger("snipshelf.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status:
        5xx → ERROR, 4xx → WARNING, otherwise INFO.
    Health probes are not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        path = request.url.path

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        uid = user_id_var.get("") or "-"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            uid,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": uid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
