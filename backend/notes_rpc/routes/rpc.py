"""
Notes RPC Backend — RPC Router
================================

What:  Maps exact operation paths to NoteService handlers and owns the
       top-level error boundary of every RPC call.
How:   One route per operation under `rpc_prefix`; each route decodes the
       payload, runs the handler inside the store lock and a session scope,
       and renders the result or error through the envelope helpers.
       Every other path under `api_prefix` is a plain-text 404.
Who:   Mounted by the app factory via `build_rpc_router(settings)`.

Route Inventory (rpc_prefix = /api/trpc):
    GET|POST  /api/trpc/getHello     static greeting
    POST      /api/trpc/createNote
    POST      /api/trpc/updateNote
    POST      /api/trpc/deleteNote
    GET|POST  /api/trpc/getNote
    GET|POST  /api/trpc/getNotes
    *         /api, /api/...         404 "Not found"

    Write-only operations still accept every RPC method so that a wrong
    verb is answered with the METHOD_NOT_SUPPORTED envelope, not a bare 405.
    HEAD is routed like GET; the envelope status is kept and the body dropped.
"""

import logging
from typing import Awaitable, Callable, Dict

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.requests import ClientDisconnect

from notes_rpc.config import Settings
from notes_rpc.database import session_scope
from notes_rpc.exceptions import InternalServerError, RpcError
from notes_rpc.routes.decoder import WRITE_METHODS, decode_payload, is_batch
from notes_rpc.routes.envelope import error_response, success_response
from notes_rpc.services.note_service import NoteService, get_hello
from notes_rpc.services.note_store import NoteStore

logger = logging.getLogger(__name__)

RPC_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

# Operation name → NoteService method name
NOTE_OPERATIONS: Dict[str, str] = {
    "createNote": "create_note",
    "updateNote": "update_note",
    "deleteNote": "delete_note",
    "getNote": "get_note",
    "getNotes": "get_notes",
}


async def _read_body(request: Request) -> bytes:
    if request.method.upper() not in WRITE_METHODS:
        return b""
    try:
        return await request.body()
    except ClientDisconnect:
        # Treated like any other undecodable payload
        return b""


async def run_operation(request: Request, operation: str) -> Response:
    """
    Execute one note operation end-to-end and return the HTTP response.

    Error boundary:
        RpcError   → its own code/status envelope
        Exception  → INTERNAL_SERVER_ERROR (500) with the failure's message
    """
    batch = is_batch(request.query_params)
    state = request.app.state
    # Read by the access logger
    request.state.rpc_operation = operation

    try:
        body = await _read_body(request)
        payload = decode_payload(
            request.method,
            request.headers,
            request.query_params,
            body,
            batch,
        )

        async with state.store_lock:
            async with session_scope(state.session_factory) as session:
                service = NoteService(NoteStore(session), clock=state.clock)
                handler = getattr(service, NOTE_OPERATIONS[operation])
                result = await handler(request.method, payload)

    except RpcError as exc:
        logger.info(
            "%s failed: %s %s | Context: %s", operation, exc.code, exc.message, exc.context
        )
        return error_response(exc, batch)
    except Exception as exc:
        logger.error("Unexpected error in %s: %s", operation, str(exc), exc_info=True)
        return error_response(InternalServerError(str(exc) or None), batch)

    return success_response(result, batch)


def _operation_endpoint(operation: str) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        return await run_operation(request, operation)

    endpoint.__name__ = operation
    return endpoint


async def get_hello_endpoint(request: Request) -> Response:
    """Connectivity check; does not touch the store."""
    request.state.rpc_operation = "getHello"
    return success_response(get_hello(), is_batch(request.query_params))


async def api_not_found(request: Request) -> Response:
    """Unknown API path: plain text, not the RPC envelope."""
    return PlainTextResponse("Not found", status_code=404)


def build_rpc_router(settings: Settings) -> APIRouter:
    """
    Assemble the RPC routes for the configured prefixes.

    Catch-all routes are added last so exact operation paths win.
    """
    router = APIRouter(tags=["RPC"])

    router.add_api_route(
        f"{settings.rpc_prefix}/getHello",
        get_hello_endpoint,
        methods=RPC_METHODS,
        name="getHello",
        summary="Static greeting",
    )

    for operation in NOTE_OPERATIONS:
        router.add_api_route(
            f"{settings.rpc_prefix}/{operation}",
            _operation_endpoint(operation),
            methods=RPC_METHODS,
            name=operation,
            summary=f"RPC operation {operation}",
        )

    for path in (settings.api_prefix, f"{settings.api_prefix}/{{rest:path}}"):
        router.add_api_route(
            path,
            api_not_found,
            methods=RPC_METHODS,
            include_in_schema=False,
        )

    return router
