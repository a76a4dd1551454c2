"""
Notes RPC Backend — Request Logging Middleware
================================================

What:  One access log line per HTTP request.
How:   Times the rest of the stack, then logs method, path, the RPC
       operation (when the request reached one), status, duration and
       client IP. Batch calls are marked with a trailing "batch".
Who:   Applied to every request via Starlette middleware.
When:  Inside RequestIDMiddleware; the request ID is added to the record
       by RequestIDLogFilter.

Not logged: request bodies and the `input` query parameter (note content
may be private). Preflight OPTIONS never reaches this middleware.

Example line:
    POST /api/trpc/createNote createNote 409 3.2ms from 127.0.0.1
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("notes_rpc.access")

# Probes hit this every few seconds
QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logging keyed by RPC operation.

    Level by status: 5xx → ERROR, 4xx → WARNING, else INFO. Paths in
    QUIET_PATHS are passed through unlogged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        # Set by the RPC router; absent for 404s and static files
        operation = getattr(request.state, "rpc_operation", None) or "-"
        batch = "batch" in request.query_params
        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code

        logger.log(
            _level_for(status),
            "%s %s %s %d %.1fms from %s%s",
            request.method,
            request.url.path,
            operation,
            status,
            duration_ms,
            client_ip,
            " batch" if batch else "",
            extra={
                "operation": operation,
                "batch": batch,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
