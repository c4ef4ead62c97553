"""
Junkick Backend — Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and echoes it back.
Why:   Error bodies carry `requestId`, so a user reporting "could not join
       the team" can hand support the exact log lines of that request.
How:   Reuses an incoming `X-Request-ID` header or generates a short UUID,
       stores it in a ContextVar (for loggers) and on `request.state` (for
       the exception handlers), and sets it on the response.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get("X-Request-ID", "").strip()
        rid = incoming[:MAX_CLIENT_ID_LENGTH] if incoming else uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
