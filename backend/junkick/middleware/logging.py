"""
Junkick Backend — Request Logging Middleware
==============================================

What:  One access-log line per API request, keyed by endpoint and caller.
Why:   Raw paths carry project and user UUIDs, so every request to
       `/api/projects/{project_id}` would look like a different endpoint.
       Logging the matched route template lets log tooling group and time
       requests per endpoint; the caller id ties a request to an account
       without logging the token.
How:   After the downstream call returns, the router has stored the matched
       route in the ASGI scope and the auth dependencies have stored the
       caller id on `request.state`. Both are read from there.

Log line:
    PATCH /api/projects/{project_id} 403 12.4ms [a1b2c3d4] caller=<uuid>
    GET /api/nope 404 0.8ms [e5f6a7b8] caller=anonymous   (unmatched: raw path)

Not logged: request bodies (passwords, messages), the Authorization header,
and /health checks.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from junkick.middleware.request_id import request_id_var

logger = logging.getLogger("junkick.access")

# Polled every few seconds by orchestrators
QUIET_PATHS = {"/health"}


def route_template(request: Request) -> Optional[str]:
    """Path template of the matched route, or None when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path_format", None) or getattr(route, "path", None)


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logger for the API.

    `endpoint` is the route template when a route matched (404s for unknown
    paths fall back to the raw path). `caller_id` is set by
    `routes.deps` when a valid token was presented, so it stays None for
    anonymous requests and for requests rejected before authentication.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        endpoint = route_template(request) or request.url.path
        caller_id = getattr(request.state, "caller_id", None)
        rid = request_id_var.get("") or getattr(request.state, "request_id", "")

        logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms [%s] caller=%s",
            request.method,
            endpoint,
            response.status_code,
            duration_ms,
            rid,
            caller_id or "anonymous",
            extra={
                "request_id": rid,
                "method": request.method,
                "endpoint": endpoint,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "caller_id": str(caller_id) if caller_id else None,
            },
        )
        return response
