"""
Toolhub Backend — Request ID Middleware
=========================================

What:  Gives every request a correlation ID, visible in logs, error bodies and
       the X-Request-ID response header.
When:  Outermost middleware.

Admin tooling shows the ID next to review errors, so a failed approval can be
traced to its claim / materialize / link log lines.

Client-supplied IDs are reused only when they are short and made of
[A-Za-z0-9._-]; anything else could forge or break log lines and is replaced.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "").strip()
        rid = supplied if _CLIENT_ID.match(supplied) else new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
