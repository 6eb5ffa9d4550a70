"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking); other writers wait up to `timeout`
- Supports INSERT ... ON CONFLICT and RETURNING since 3.35
"""

from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlalchemy.sql.dml import Insert

from tinylink.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    This adapter handles all SQLite-specific configuration and operations.
    """

    def create_engine(self, database_url: str, timeout: float = 10.0, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool: a fresh connection per session, so concurrent sessions
          queue on the file lock instead of sharing one connection
        - check_same_thread=False: Required for async SQLite operations
        - timeout: how long a writer waits for the file lock

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            timeout: Lock wait in seconds
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        return create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(timeout),
            **engine_kwargs
        )

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self, timeout: float) -> dict[str, Any]:
        return {
            "check_same_thread": False,
            "timeout": timeout,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def insert_if_absent(self, table: Table, values: dict[str, Any], key: str) -> Insert:
        """
        INSERT ... ON CONFLICT (key) DO NOTHING.

        SQLite serializes writers, so two racing inserts of the same key
        cannot both succeed; the loser gets an empty RETURNING set.
        """
        return sqlite_insert(table).values(**values).on_conflict_do_nothing(
            index_elements=[key]
        )

    def get_dialect_name(self) -> str:
        return "sqlite"
