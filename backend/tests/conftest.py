"""
Pytest configuration and shared fixtures for Storefront tests.

Provides an in-memory SQLite store, an OrderTransactionManager bound to it,
and an httpx client over the ASGI app with the store dependencies overridden.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, build_session_factory, get_db
from deps import get_order_manager
from middleware.rate_limit import limiter
from services.order_service import OrderTransactionManager
from tests.helpers import seed_user

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory over a fresh in-memory database for each test.

    Uses StaticPool so every session sees the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def order_manager(session_factory) -> OrderTransactionManager:
    return OrderTransactionManager(session_factory)


@pytest.fixture(scope="function")
async def client(session_factory, order_manager) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx client over the ASGI app with store dependencies pointed at the
    test database.
    """
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_manager] = lambda: order_manager
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def buyer_id(session_factory) -> int:
    return await seed_user(session_factory)
