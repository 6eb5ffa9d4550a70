"""
SQL-backed Link Store

Implements the LinkStore contract on top of SQLAlchemy's async engine.

Atomicity comes from the database, one statement per operation:
- insert_if_absent: INSERT ... ON CONFLICT (code) DO NOTHING RETURNING *
- increment_and_fetch: UPDATE ... SET total_clicks = total_clicks + 1 ... RETURNING target_url

Every operation runs in its own short transaction. SQLAlchemy errors are
rolled back by the session context and re-raised as StoreUnavailableError.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tinylink.core.exceptions import StoreUnavailableError
from tinylink.core.setting import Settings
from tinylink.db.interface import DatabaseAdapter, LinkStore
from tinylink.db.models import Link, utcnow
from tinylink.db.session import (
    create_db_engine,
    create_session_maker,
    get_database_adapter,
    init_models,
)

links_table = Link.__table__


class SQLModelLinkStore(LinkStore):
    """
    LinkStore backed by SQLite or PostgreSQL.

    Owns its engine: open with from_settings() at startup, close() at shutdown.
    """

    def __init__(self, engine: AsyncEngine, adapter: DatabaseAdapter):
        self.engine = engine
        self.adapter = adapter
        self.session_maker: async_sessionmaker = create_session_maker(engine)

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "SQLModelLinkStore":
        adapter = get_database_adapter(app_settings.DATABASE_URL)
        return cls(create_db_engine(app_settings, adapter), adapter)

    async def create_schema(self) -> None:
        try:
            await init_models(self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("failed to create schema", original_error=e)

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside a transaction that commits on exit.

        Driver failures (connection refused, lock timeout, ...) surface as
        StoreUnavailableError; the transaction is rolled back first.
        """
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            raise StoreUnavailableError(f"{operation} failed: {e}", original_error=e)

    async def insert_if_absent(self, code: str, target_url: str) -> Optional[Link]:
        statement = self.adapter.insert_if_absent(
            links_table,
            {
                "code": code,
                "target_url": target_url,
                "created_at": utcnow(),
                "total_clicks": 0,
                "last_clicked_at": None,
            },
            key="code",
        ).returning(*links_table.c)

        async with self._transaction("insert") as session:
            result = await session.execute(statement)
            row = result.mappings().first()

        if row is None:
            return None
        return Link(**row)

    async def increment_and_fetch(self, code: str) -> Optional[str]:
        statement = (
            update(links_table)
            .where(links_table.c.code == code)
            .values(
                total_clicks=links_table.c.total_clicks + 1,
                last_clicked_at=utcnow(),
            )
            .returning(links_table.c.target_url)
        )

        async with self._transaction("increment") as session:
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> Optional[Link]:
        statement = select(Link).where(Link.code == code)
        async with self._transaction("lookup") as session:
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def list_all(self) -> list[Link]:
        statement = select(Link).order_by(Link.created_at.desc(), Link.id.desc())
        async with self._transaction("list") as session:
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def delete_by_code(self, code: str) -> None:
        statement = delete(links_table).where(links_table.c.code == code)
        async with self._transaction("delete") as session:
            await session.execute(statement)
