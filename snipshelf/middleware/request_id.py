"""
SnipShelf Backend — Request ID Middleware
===========================================

What:  Assigns a correlation id to each request and returns it in X-Request-ID.
How:   Reuses the caller's X-Request-ID when present, otherwise generates a
       short UUID; stores it in a ContextVar for loggers and error handlers.
When:  Outermost application middleware, so every log line of a request
       (access log, service logs, error handlers) carries the same id.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client (frontend or gateway) if sent
        2. Otherwise generate 8 hex chars of a UUID4
        3. Store in the ContextVar and on request.state
        4. Echo it back in the response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
