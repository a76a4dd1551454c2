"""
Notes RPC Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own app bound to a fresh SQLite file under
       pytest's tmp_path, so tests never share rows.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy (all function-scoped):
    test_settings ─┐
    clock ─────────┼── app ──┬── test_client  (httpx AsyncClient over ASGI)
                   │         └── db_session   (session_scope on the app's store)
    sample_note_data
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any app imports
# The module-level app in notes_rpc.main must not touch ./data
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="notes_rpc_test_"), "import.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from notes_rpc.config import Settings  # noqa: E402
from notes_rpc.database import dispose_engine, init_models, session_scope  # noqa: E402
from notes_rpc.main import create_app  # noqa: E402


class StepClock:
    """
    Deterministic clock: every call is one second later than the previous.

    Keeps createdAt ordering strict no matter how fast tests run.
    """

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.current = start
        self.calls = 0

    def __call__(self) -> str:
        self.current += timedelta(seconds=1)
        self.calls += 1
        return self.current.isoformat(timespec="microseconds").replace("+00:00", "Z")


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a per-test SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings, clock):
    """
    A fully wired application with its table created.

    httpx's ASGITransport does not run the lifespan, so the schema is
    created here and the engine disposed on teardown.
    """
    application = create_app(test_settings)
    application.state.clock = clock
    await init_models(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_hello(test_client):
            response = await test_client.get("/api/trpc/getHello")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def db_session(app):
    """A session on the test store; committed when the test finishes."""
    async with session_scope(app.state.session_factory) as session:
        yield session


@pytest.fixture
def sample_note_data():
    """Field values for a Note row."""
    return {
        "id": "0b6f1c52-8d0e-4a53-9a37-2f8c5d1e7a10",
        "title": "Shopping list",
        "content": "Milk, eggs, bread",
        "category": "personal",
        "published": 1,
        "created_at": "2024-01-15T12:00:00.000000Z",
        "updated_at": "2024-01-15T12:00:00.000000Z",
    }
