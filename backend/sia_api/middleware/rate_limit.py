"""
SIA API: Rate Limiting Middleware
=================================

What:  Per-IP sliding-window request limiter.
How:   Keeps the timestamps of each IP's requests inside the window. A
       request arriving when the window is full gets 429 with a
       `Retry-After` header computed from the oldest timestamp.

Scope:
    State lives in process memory, so each worker process counts on its
    own. /health and the docs pages are never limited.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from sia_api.exceptions import RateLimitExceededError
from sia_api.responses import error_response

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Sweep idle IPs after this many tracked requests.
    SWEEP_EVERY = 1000

    def __init__(self, app: ASGIApp, max_requests: int = 100, window_seconds: int = 3600):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._since_sweep = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        window_start = now - self.window_seconds

        hits = self._hits[client_ip]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client_ip, len(hits), self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return error_response(
                429,
                "rate_limit_exceeded",
                exc.message,
                details=exc.context,
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._since_sweep += 1
        if self._since_sweep >= self.SWEEP_EVERY:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        """Drops IPs with no request inside the current window."""
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]
        self._since_sweep = 0
        if idle:
            logger.debug("Dropped %d idle rate-limit entries", len(idle))
