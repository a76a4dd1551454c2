"""
Notes RPC Backend — Request ID Middleware
===========================================

What:  Correlation ID for each request, echoed to the client and stamped on
       every log record written while the request is handled.
How:   A well-formed client X-Request-ID is reused; anything else (missing,
       too long, odd characters) is replaced by a fresh 8-char UUID prefix.
       The ID lives in a ContextVar, which RequestIDLogFilter copies onto
       log records as `request_id`.
Who:   Middleware applied to every request; the filter is installed by
       `setup_logging`.
When:  Before the access logger, so log lines carry the ID.
"""

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines verbatim
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(candidate: Optional[str]) -> str:
    """The client's ID when it is safe to log, otherwise a new one."""
    if candidate and _VALID_REQUEST_ID.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())[:8]


class RequestIDLogFilter(logging.Filter):
    """Adds `record.request_id` ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns the request ID before routing and echoes it in the response.

    The ID is also kept on request.state for handlers that want it.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
