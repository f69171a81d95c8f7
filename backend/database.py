"""
Database engine and session management for the Storefront API.

Uses SQLAlchemy async engine (aiosqlite for SQLite) for non-blocking DB
operations inside FastAPI. The engine and session factory are built in the
app lifespan and kept on ``app.state``; nothing here holds a global pool.
"""
import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


# ── Engine ──────────────────────────────────────────────────────────

def build_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 0,
    pool_timeout: float = 30.0,
    connect_timeout: float = 60.0,
) -> AsyncEngine:
    """Create the async engine. SQLite gets a busy timeout instead of pool sizing."""
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": connect_timeout},
        )

    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ── Helpers ─────────────────────────────────────────────────────────

async def init_db(engine: AsyncEngine) -> None:
    """Create all tables. Called once on server startup."""
    # Import models so Base.metadata knows about them
    import db_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created (or already exist)")


async def get_db(request: Request) -> AsyncSession:
    """FastAPI dependency: yields an async session from the app's factory."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
