"""
SnipShelf Backend — Authentication Middleware
===============================================

What:  Resolves the authenticated principal for each request.
Why:   Sign-in and session issuance live in the upstream gateway. By the time
       a request reaches us it has been authenticated and the gateway
       forwards the principal in trusted headers.
How:   Reads settings.auth_user_header (default X-User-Id) plus the optional
       email/name headers and stores a CurrentUser (or None) on
       request.state.user. It never rejects a request itself: `require_user`
       decides, so /health and /docs stay reachable anonymously.

Security Note:
    These headers are trusted blindly. The gateway MUST strip any client-sent
    copies before forwarding.
"""

from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipshelf.auth import CurrentUser
from snipshelf.config import settings

# Principal id for log lines emitted outside the route (access log)
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Places `CurrentUser | None` on request.state.user."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        user_id = request.headers.get(settings.auth_user_header, "").strip()

        if user_id:
            request.state.user = CurrentUser(
                id=user_id,
                email=request.headers.get(settings.auth_email_header) or None,
                name=request.headers.get(settings.auth_name_header) or None,
            )
        else:
            request.state.user = None

        user_id_var.set(user_id)
        return await call_next(request)
