"""
DevConnect Backend - Access Log Middleware
============================================

One line per request on the `devconnect.access` logger:

    POST /requests/send/interested/5f0c... 201 12.4ms [3fa1c09b22de] from 10.0.0.7 user=9b2e...

Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
Bodies and cookies are never logged. /health is skipped.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from devconnect.middleware.request_id import request_id_var

logger = logging.getLogger("devconnect.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration, request id and caller."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
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
        client_ip = request.client.host if request.client else "unknown"
        # Set by get_current_user on authenticated routes
        user_id = getattr(request.state, "user_id", "-")

        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method, path, status, duration_ms, rid, client_ip, user_id,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )
        return response
