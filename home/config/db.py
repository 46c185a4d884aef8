"""Async SQLAlchemy engine and session factory for the local store."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from home.settings import settings as s
from home.utils.logging_config import logger


def create_engine_for(url: str) -> AsyncEngine:
    """
    Build an async engine for `url`.

    An in-memory SQLite database lives only as long as its connection, so it
    gets a single shared connection.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("://"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=s.DEBUG, **kwargs)

    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=20,
        max_overflow=20,
        echo=s.DEBUG,
    )


def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


async def check_db_connection(engine: AsyncEngine):
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        raise
