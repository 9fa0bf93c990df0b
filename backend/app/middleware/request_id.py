"""
Daylog Backend — Request ID Middleware
========================================

What:  Assigns a correlation id to each request and echoes it in the response.
How:   Takes X-Request-ID from the client or generates a short UUID, stores it
       in a ContextVar for loggers and exception handlers, and sets it on
       request.state for route handlers.
When:  First middleware in the chain.

Error bodies carry the same id as `request_id`, so a client can quote it
when reporting a failure.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Use the client's X-Request-ID when present, else generate one."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
