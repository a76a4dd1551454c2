"""
Notes RPC Backend — Health Check Route
========================================

What:  Health check endpoint for container and load balancer probes.
How:   Runs `SELECT 1` against the note store and reports aggregate status.
Who:   Called by Docker health checks and monitoring systems.

Status levels:
    healthy:   store reachable (HTTP 200)
    unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notes_rpc import __version__
from notes_rpc.database import ping
from notes_rpc.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Note store unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    """
    Check the health of the service and its store.

    Returns:
        HealthResponse with store status and uptime; 503 when the store
        cannot execute a trivial query.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await ping(request.app.state.engine)
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
