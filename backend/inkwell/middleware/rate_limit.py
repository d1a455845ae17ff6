"""
Inkwell Backend — Rate Limiting Middleware
===========================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the request timestamps of each client IP in memory.

Algorithm: Sliding Window Log
    1. Each IP gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If the remaining count >= limit, reject with 429 + Retry-After
    4. Otherwise record the current timestamp and let the request through

Client identity:
    X-Forwarded-For is only honoured when the connection comes from an
    address in TRUSTED_PROXY_IPS (see get_client_ip).

Scope:
    State lives in the process. Each uvicorn worker enforces its own limit;
    a shared limit across workers needs an external store.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inkwell.config import settings
from inkwell.exceptions import RateLimitExceededError
from inkwell.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = {
    "/api/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/sitemap.xml",
    "/robots.txt",
}

# Drop idle IPs every this many recorded requests
CLEANUP_EVERY = 1000


def get_client_ip(request: Request) -> str:
    """
    The socket peer, unless the peer is a trusted proxy.

    Behind trusted proxies X-Forwarded-For is read right to left and the
    first hop that is not itself a trusted proxy is the client. Hops left
    of it are client-supplied and never used.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = settings.trusted_proxy_ips_set
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded or peer not in trusted:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Configuration (from settings):
        rate_limit_requests: Max requests per window (default: 100)
        rate_limit_window:   Window duration in seconds (default: 3600)
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = get_client_ip(request)
        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip, len(timestamps), settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_body(request_id_var.get("")),
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
