"""
DevConnect Backend - Rate Limiting Middleware
===============================================

What:  Per-IP sliding-window limiter (default 100 requests per 15 minutes).
How:   Keeps the timestamps of each IP's recent requests in memory; once the
       window holds `max_requests` entries further requests get 429 with a
       Retry-After header until the oldest entry ages out.

Single-process only: each uvicorn worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from devconnect.exceptions import RateLimitExceededError
from devconnect.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        max_requests:    requests allowed per window (Settings.rate_limit_requests)
        window_seconds:  window length (Settings.rate_limit_window)

    /health and the API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Sweep idle IPs every N admitted requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._admitted = 0

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
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip, len(hits), self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            # Raised outside the router, so the app's exception handlers
            # never see it; build the envelope here
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.error_code,
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": getattr(request.state, "request_id", request_id_var.get("")),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._admitted += 1
        if self._admitted % self.CLEANUP_EVERY == 0:
            self._cleanup_idle(window_start)

        return await call_next(request)

    def _cleanup_idle(self, window_start: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]
        if idle:
            logger.debug("Dropped rate-limit state for %d idle IPs", len(idle))
