# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

Every test gets its own SQLite file so state never leaks between tests.
"""

import asyncio
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database.engine import get_db, init_db
from app.features.staff.auth import create_access_token
from app.main import app


def make_engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'config.db'}", poolclass=NullPool)


def make_session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def engine(tmp_path):
    """Async engine with every Config table created."""
    engine = make_engine(tmp_path)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session on the per-test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def override_get_db(tmp_path):
    """Replacement for get_db bound to a fresh database file."""
    engine = make_engine(tmp_path)
    asyncio.run(init_db(engine))
    factory = make_session_factory(engine)

    async def override():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    yield override
    asyncio.run(engine.dispose())


@pytest.fixture
def client(override_get_db) -> Generator[TestClient, None, None]:
    """Test client whose get_db dependency points at a fresh database."""
    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager: startup would create tables in the default database
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(position: str, staff_id: int = 1) -> dict:
    token = create_access_token(staff_id=staff_id, position=position, username=f"{position}-{staff_id}")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers():
    return auth_headers("manager", staff_id=7)


@pytest.fixture
def admin_headers():
    return auth_headers("admin", staff_id=1)


@pytest.fixture
def agent_headers():
    return auth_headers("agent", staff_id=42)


@pytest.fixture
def make_headers():
    """Build bearer headers for any position."""
    return auth_headers
