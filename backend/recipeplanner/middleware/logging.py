"""
RecipePlanner Backend - Request Logging Middleware
===================================================

What:  One access-log line per HTTP request.
How:   Measures wall time around the handler and logs method, path, status,
       duration, request ID, client IP and (when the access guard ran) the
       authenticated user id.
When:  Runs after RequestIDMiddleware so the request ID is available.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID, user id
    ❌ Don't log: request bodies (passwords), the x-auth-token header, query
       strings (the recipe API key is never in ours, but keep it that way)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from recipeplanner.middleware.request_id import request_id_var

logger = logging.getLogger("recipeplanner.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log level follows the status code:
        5xx → ERROR, 4xx → WARNING, everything else → INFO

    /health is skipped; container probes hit it every few seconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Set by AccessGuard on protected routes; request.state is shared
        # with the endpoint through the ASGI scope
        user = getattr(request.state, "user", None)
        user_id = user.id if user is not None else "-"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        return response
