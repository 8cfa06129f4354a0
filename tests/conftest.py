# File: tests/conftest.py
"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import all models
import breadpos.models  # noqa: F401
from breadpos.api.auth import get_current_staff
from breadpos.core.cache import clear_cache
from breadpos.core.db import Base, get_db, get_session_factory
from breadpos.main import create_app
from breadpos.models.enums import StaffRole
from tests.factories import StaffFactory


@pytest.fixture(autouse=True)
def reset_cache():
    """Report caches are process-wide; start every test empty."""
    clear_cache()
    yield
    clear_cache()


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite so request sessions and background jobs share one database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'breadpos_test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create fresh DB session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


def build_app(session_factory, staff=None):
    """App with a fresh session per request, committed like the real dependency."""
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    if staff is not None:

        async def override_get_current_staff():
            return staff

        app.dependency_overrides[get_current_staff] = override_get_current_staff

    return app


async def _client_for(session_factory, db_session, staff):
    app = build_app(session_factory, staff)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        # Attach staff and session to client for test access
        ac.test_user = staff
        ac.db_session = db_session
        ac.app = app
        yield ac


@pytest_asyncio.fixture
async def client(session_factory, db_session):
    """Client logged in as a register cashier (STAFF)."""
    staff = await StaffFactory.create(db_session, name="Test Cashier", role=StaffRole.STAFF.value)
    async for ac in _client_for(session_factory, db_session, staff):
        yield ac


@pytest_asyncio.fixture
async def baker_client(session_factory, db_session):
    staff = await StaffFactory.create(db_session, name="Test Baker", role=StaffRole.BAKER.value)
    async for ac in _client_for(session_factory, db_session, staff):
        yield ac


@pytest_asyncio.fixture
async def manager_client(session_factory, db_session):
    staff = await StaffFactory.create(db_session, name="Test Manager", role=StaffRole.MANAGER.value)
    async for ac in _client_for(session_factory, db_session, staff):
        yield ac


@pytest_asyncio.fixture
async def admin_client(session_factory, db_session):
    """Create async test client with admin staff."""
    staff = await StaffFactory.create(db_session, name="Test Admin", role=StaffRole.ADMIN.value)
    async for ac in _client_for(session_factory, db_session, staff):
        yield ac


@pytest_asyncio.fixture
async def unauthenticated_client(session_factory, db_session):
    """AsyncClient without the staff override (for login flows and auth failures)."""
    async for ac in _client_for(session_factory, db_session, None):
        yield ac
