"""
ResourcePulse Backend - Rate Limiting Middleware
================================================

What:  Per-IP sliding-window limiter.
How:   Keeps the timestamps of each IP's requests inside the window. When
       the count reaches the limit the request is answered with 429 and a
       `Retry-After` header computed from the oldest timestamp.

In-memory state is per process. With several workers each one enforces
its own window.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from resource_pulse.config import settings
from resource_pulse.exceptions import RateLimitExceededError
from resource_pulse.middleware.logging import client_ip
from resource_pulse.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        ip = client_ip(request)
        now = time.time()
        window_start = now - self.window_seconds
        timestamps = self._requests[ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                ip,
                len(timestamps),
                self.window_seconds,
            )
            # Raised exceptions would bypass FastAPI's handlers from here,
            # so the error body is rendered directly.
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=error.status_code,
                content={
                    "error": error.error_code,
                    "message": error.message,
                    "details": error.context,
                    "request_id": request_id_var.get("") or None,
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup(window_start)

        return await call_next(request)

    def _cleanup(self, window_start: float) -> None:
        """Drops IPs with no request inside the window."""
        stale = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in stale:
            del self._requests[ip]
        if stale:
            logger.debug("Cleaned up %d inactive IP entries", len(stale))
