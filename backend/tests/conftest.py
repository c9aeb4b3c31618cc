"""
Toolhub Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a brand-new in-memory SQLite database (aiosqlite,
       StaticPool so all sessions share the one connection), with the same
       SAVEPOINT / foreign-key hooks the application installs for SQLite.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine: async engine with all tables created
    ├── session_factory: async_sessionmaker bound to that engine
    ├── db_session: one AsyncSession for service-level tests
    ├── make_request: inserts a ToolRequest (pending by default)
    ├── test_client: HTTPX AsyncClient over a fresh app using the test database
    └── admin_headers: headers carrying the test admin key
"""

import os

# Override settings for testing BEFORE any toolhub imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import toolhub.models  # noqa: F401
from toolhub.database import Base, configure_sqlite, get_db_session
from toolhub.models.tool_request import RequestStatus, ToolRequest

TEST_ADMIN_KEY = "test-admin-key"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for calling services directly.

    Usage:
        async def test_deny(db_session, make_request):
            request = await make_request()
            await request_service.transition(db_session, request.id, "denied")
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_request(db_session):
    """Factory inserting a tool request and flushing it."""

    async def _make(
        name: str = "Foo",
        url: str = "https://foo.dev",
        description: Optional[str] = "A tool that does foo things.",
        tags: Any = None,
        status: str = RequestStatus.PENDING.value,
        created_at: Optional[datetime] = None,
    ) -> ToolRequest:
        request = ToolRequest(
            name=name,
            url=url,
            description=description,
            tags=["x", "y"] if tags is None else tags,
            status=status,
        )
        if created_at is not None:
            request.created_at = created_at
        db_session.add(request)
        await db_session.flush()
        return request

    return _make


async def count_of(db: AsyncSession, model) -> int:
    """Row count of a model's table."""
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": TEST_ADMIN_KEY}


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient talking to a freshly created app whose
             get_db_session dependency uses the test database.
    Note:    Seed data through `session_factory` and commit it before calling
             the API; all sessions share a single SQLite connection.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from toolhub.main import create_app

    app = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
