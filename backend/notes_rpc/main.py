"""
Notes RPC Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the store (engine, session
       factory, lock), registers middleware and routes, and returns the app.
Who:   Called by uvicorn (uvicorn notes_rpc.main:app) and by the test suite.
When:  Once at server startup; the returned app handles all requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ CORS/OPTIONS │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌──────────┐ ┌─────────────┐  │
    │  │ /api/trpc/<op>   │ │ /api/*   │ │ GET /health │  │
    │  │ (RPC envelope)   │ │ 404 text │ │             │  │
    │  └──────────────────┘ └──────────┘ └─────────────┘  │
    │                                                     │
    │  State: engine │ session_factory │ store_lock │ clock│
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the notes table if missing
    Shutdown: dispose the engine (close all connections)
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from notes_rpc import __version__
from notes_rpc.config import Settings, settings as default_settings
from notes_rpc.database import (
    build_engine,
    build_session_factory,
    dispose_engine,
    init_models,
)
from notes_rpc.middleware.cors import CORSHeadersMiddleware
from notes_rpc.middleware.logging import RequestLoggingMiddleware
from notes_rpc.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from notes_rpc.routes import health
from notes_rpc.routes.rpc import build_rpc_router
from notes_rpc.services.note_service import utc_now_iso

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime)
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, schema creation.
    Shutdown: engine disposal.
    """
    config: Settings = app.state.settings

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Notes RPC Backend starting up...")

    await init_models(app.state.engine)

    logger.info("RPC endpoints under %s", config.rpc_prefix)
    if config.static_root:
        logger.info("Serving static assets from %s", config.static_root)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Notes RPC Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the environment-loaded settings.

    Returns:
        Fully configured FastAPI instance. Its store handles live on
        `app.state` (engine, session_factory, store_lock, clock).
    """
    config = config or default_settings

    app = FastAPI(
        title="Notes RPC API",
        description="RPC-style CRUD API for notes backed by an embedded SQLite store.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Store Handles ─────────────────────────────────────────────────────
    engine = build_engine(config.database_url, echo=config.sql_echo)
    app.state.settings = config
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    # One logical store: RPC operations run one at a time
    app.state.store_lock = asyncio.Lock()
    app.state.clock = utc_now_iso

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = outermost: CORS → RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        headers=config.cors_headers,
        max_age=config.cors_max_age,
    )

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(build_rpc_router(config))
    app.include_router(health.router)

    # Non-API paths go to the asset directory when one is configured
    if config.static_root:
        app.mount("/", StaticFiles(directory=config.static_root, html=True), name="static")

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "notes_rpc.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
    )
