"""
Inkwell Backend: Request ID Middleware
========================================

What:  Gives every request a short correlation id and echoes it back.
How:   Takes X-Request-ID from the client when it looks sane, otherwise
       generates one; stores it in a ContextVar and in request.state, and
       sets it on the response.
Who:   Read by the access log middleware and by the exception handlers,
       which put it in error bodies.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are echoed into logs and headers, so only short tokens are accepted
_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and adds it to the response headers."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_id = request.headers.get(REQUEST_ID_HEADER, "")
        rid = client_id if _CLIENT_ID_RE.match(client_id) else new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
