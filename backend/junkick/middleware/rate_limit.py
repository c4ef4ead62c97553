"""
Junkick Backend — Rate Limiting Middleware
============================================

What:  Per-IP sliding window rate limiter for the API routes.
Why:   Login and registration are credential-guessing targets; listing is
       the most expensive query. Both sit under the API prefix.
How:   Keeps each IP's request timestamps for the last `rate_limit_window`
       seconds in memory. Once `rate_limit_requests` are inside the window,
       further requests get 429 until the oldest one ages out.

Scope:
    Only paths under `settings.api_prefix` are counted; /health and the docs
    are always reachable. The limiter holds per-process state, so each worker
    counts separately.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from junkick.config import Settings, settings as default_settings
from junkick.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Response on rate limit:
        HTTP 429, `Retry-After` header, and the standard error body with
        code RATE_LIMIT_EXCEEDED and `details.retryAfter`.
    """

    def __init__(self, app, config: Optional[Settings] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.config = config or default_settings
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    def _is_limited_path(self, path: str) -> bool:
        prefix = self.config.api_prefix
        return not prefix or path == prefix or path.startswith(prefix + "/")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self._is_limited_path(request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window = self.config.rate_limit_window
        window_start = now - window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.config.rate_limit_requests:
            retry_after = int(timestamps[0] + window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip, len(timestamps), window,
            )
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=error.status_code,
                content={
                    "error": {
                        "message": error.message,
                        "code": error.code,
                        "details": error.details,
                        "requestId": getattr(request.state, "request_id", None),
                    }
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
