"""
ResourcePulse Backend - Access Log Middleware
=============================================

What:  One log line per request on the `resource_pulse.access` logger.
How:   Level follows the status class: 5xx ERROR, 4xx WARNING, else INFO.
       Structured fields go in `extra` for log shippers that index them.

Logged: method, path, status, duration, client IP, request id.
Not logged: bodies and Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from resource_pulse.middleware.request_id import request_id_var

logger = logging.getLogger("resource_pulse.access")

# Polled every few seconds by orchestrators
QUIET_PATHS = {"/health"}


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        ip = client_ip(request)
        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": ip,
            },
        )
        return response
