"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  Redis is replaced by an ``AsyncMock`` whose
``SET NX`` always succeeds, so the seat lock is always granted.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridealong.api.app import create_app
from ridealong.api.dependencies import get_db
from ridealong.api.middleware import limiter
from ridealong.infrastructure.database import Base
from ridealong.infrastructure.models import UserModel
from ridealong.infrastructure.redis_client import get_redis

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

DRIVER_ID = 1
PASSENGER_ID = 2
OTHER_PASSENGER_ID = 3


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema with a driver and two passengers; dropped afterwards."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add_all(
            [
                UserModel(id=DRIVER_ID, name="Kemi Adebayo", email="kemi@example.com"),
                UserModel(id=PASSENGER_ID, name="Chidi Okonkwo", email="chidi@example.com"),
                UserModel(
                    id=OTHER_PASSENGER_ID, name="Fatima Ibrahim", email="fatima@example.com"
                ),
            ]
        )
        await session.commit()

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def fake_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)
    return redis


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite and the fake Redis."""

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_redis():
        return fake_redis

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_redis] = _test_redis
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
