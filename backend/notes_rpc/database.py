"""
Notes RPC Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine/session construction, the declarative Base,
       and a transactional session scope used once per RPC operation.
How:   The app factory builds one engine + session factory per application
       and keeps them on `app.state`; nothing here is a process-wide singleton.
Who:   Used by the app factory, the RPC router and the health probe.
When:  Engine is created with the app; sessions are created per operation.

Storage:
    The note store is an embedded SQLite file accessed through aiosqlite.
    The single table is created on startup (CREATE TABLE IF NOT EXISTS
    semantics via metadata.create_all); there is no migration tooling.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object so `init_models` can create every table.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for the note store.

    For file-backed SQLite URLs the parent directory is created first,
    otherwise the first connection fails with "unable to open database file".
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(database_url, echo=echo)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: ORM objects stay readable after commit, which
    lets handlers serialize a note after its transaction is closed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a session for exactly one RPC operation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the handler performs queries)
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example:
        async with session_scope(app.state.session_factory) as session:
            store = NoteStore(session)
            note = await store.select_by_id(note_id)
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise  # Re-raise so the router can map it to an error envelope


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models(engine: AsyncEngine) -> None:
    """
    Create all tables that do not exist yet.

    When:  On application startup, and from the test fixtures (httpx's
           ASGITransport does not run the lifespan).
    """
    # Import models so they register with Base.metadata
    from notes_rpc.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))


async def ping(engine: AsyncEngine) -> None:
    """Run `SELECT 1`; raises if the store is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
