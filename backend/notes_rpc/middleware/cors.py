"""
Notes RPC Backend — CORS Headers Middleware
=============================================

What:  Attaches the configured CORS headers to every response and answers
       every OPTIONS request as a preflight.
How:   OPTIONS never reaches routing: it gets an empty 200 response with the
       CORS headers plus Access-Control-Max-Age. Other requests pass through
       and have the headers set on whatever response comes back, including
       plain-text 404s and error envelopes.
Who:   Applied to every request via Starlette middleware.

Starlette's CORSMiddleware only reacts to requests that carry an Origin
header; RPC clients here expect the headers unconditionally.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Unconditional CORS headers and preflight handling.

    Args:
        headers:  Access-Control-Allow-* headers for every response
        max_age:  seconds a preflight result may be cached by the browser
    """

    def __init__(self, app: ASGIApp, headers: Dict[str, str], max_age: int = 86400):
        super().__init__(app)
        self.headers = dict(headers)
        self.max_age = max_age

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(
                content=None,
                status_code=200,
                headers={**self.headers, "Access-Control-Max-Age": str(self.max_age)},
            )

        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers[name] = value
        return response
