"""
Inkwell Backend — Request Logging Middleware
=============================================

What:  One access-log line per HTTP request on the `inkwell.access` logger.
How:   Measures the duration around the downstream call and picks the log
       level from the status code.

Line format:
    POST /api/admin/moderation/…/reject 409 12.3ms [3f2a9c1b] from 203.0.113.7

Structured fields (request_id, method, path, status, duration_ms, client_ip)
are also attached via `extra` for JSON log shippers.

What we log vs what we DON'T log (privacy):
    Logged: method, path, status, duration, client IP, request ID
    Not logged: request bodies, query strings, Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from inkwell.middleware.rate_limit import get_client_ip
from inkwell.middleware.request_id import request_id_var

logger = logging.getLogger("inkwell.access")

# Probed every few seconds by load balancers
UNLOGGED_PATHS = {"/api/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        client_ip = get_client_ip(request)
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
