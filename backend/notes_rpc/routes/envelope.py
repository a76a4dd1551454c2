"""
Notes RPC Backend — Response Envelope
=======================================

What:  Wraps handler results and errors in the fixed RPC envelope.
How:   Success → {"result": {"data": <payload>}}
       Error   → {"error": {"message": ..., "code": ...}} with the status
                 carried by the RpcError subclass
       In batch mode either envelope is sent as a one-element list.
Who:   Used by the RPC router for every in-scope response.

CORS headers are added by CORSHeadersMiddleware, not here.
"""

from typing import Any

from fastapi.responses import JSONResponse

from notes_rpc.exceptions import RpcError


def _wrap(envelope: dict, batch: bool) -> Any:
    return [envelope] if batch else envelope


def success_response(data: Any, batch: bool = False) -> JSONResponse:
    """200 response carrying `data` in the success envelope."""
    return JSONResponse(content=_wrap({"result": {"data": data}}, batch))


def error_response(exc: RpcError, batch: bool = False) -> JSONResponse:
    """Error envelope built from the exception's code, message and status."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_wrap({"error": {"message": exc.message, "code": exc.code}}, batch),
    )
