"""
Database Session Management

This module builds the async engine and session factory. Nothing here is
created at import time: the application lifespan (or a test fixture) calls
these helpers and owns the resulting engine until shutdown.

Key Features:
- Database abstraction: the adapter is picked from the URL scheme
- Async session management: sessions come from one async_sessionmaker
- Schema bootstrap: init_models() for development and tests
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from tinylink.core.setting import Settings
from tinylink.db import models  # noqa: F401  (registers tables on SQLModel.metadata)
from tinylink.db.interface import DatabaseAdapter
from tinylink.db.postgres_adapter import PostgreSQLAdapter
from tinylink.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Pick the adapter matching the database URL.

    Raises:
        ValueError: If the URL names an unsupported backend
    """
    if database_url.startswith("sqlite"):
        return SQLiteAdapter()
    if database_url.startswith("postgresql"):
        return PostgreSQLAdapter()
    raise ValueError(f"Unsupported database URL: {database_url}")


def create_db_engine(app_settings: Settings, adapter: DatabaseAdapter) -> AsyncEngine:
    return adapter.create_engine(
        app_settings.DATABASE_URL,
        timeout=app_settings.DATABASE_TIMEOUT,
        echo=app_settings.DATABASE_ECHO,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create the async session factory bound to ``engine``.

    expire_on_commit=False keeps returned Link objects readable after the
    session that loaded them has closed.
    """
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables (Alembic manages schema in production)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
