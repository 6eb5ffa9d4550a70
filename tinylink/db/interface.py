"""
Database Abstraction Interfaces

Two contracts live here:

- DatabaseAdapter: everything dialect-specific about building an engine and
  the one statement whose syntax differs between backends (the conditional
  insert). SQLite and PostgreSQL adapters implement it.
- LinkStore: the five operations the allocator and resolver depend on. The
  services only ever see this interface, so the backend can be swapped (or
  faked in tests) without touching them.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import Pool
from sqlalchemy.sql.dml import Insert

from tinylink.db.models import Link


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    To add a new database backend:
    1. Create a new class inheriting from DatabaseAdapter
    2. Implement all abstract methods
    3. Register it in get_database_adapter()
    """

    @abstractmethod
    def create_engine(self, database_url: str, timeout: float = 10.0, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            timeout: Seconds to wait on connect / locks
            **kwargs: Additional engine configuration options

        Returns:
            Configured AsyncEngine instance
        """
        pass

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """
        Get the connection pool class for this database type.

        Returns:
            Pool class, or None to use the SQLAlchemy default
        """
        pass

    @abstractmethod
    def get_connect_args(self, timeout: float) -> dict[str, Any]:
        """
        Get DBAPI connection arguments for this database type.

        Args:
            timeout: Seconds to wait on connect / locks
        """
        pass

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Get additional engine configuration for this database type."""
        pass

    @abstractmethod
    def insert_if_absent(self, table: Table, values: dict[str, Any], key: str) -> Insert:
        """
        Build an INSERT that silently skips rows whose ``key`` already exists.

        Callers add RETURNING; an empty result means the key was taken.
        """
        pass

    @abstractmethod
    def get_dialect_name(self) -> str:
        """Get the SQLAlchemy dialect name (e.g. 'sqlite', 'postgresql')."""
        pass


class LinkStore(ABC):
    """
    Durable mapping from short code to Link.

    Implementations must make insert_if_absent and increment_and_fetch
    atomic with respect to concurrent callers, and raise
    StoreUnavailableError for any transport or database failure.
    """

    @abstractmethod
    async def insert_if_absent(self, code: str, target_url: str) -> Optional[Link]:
        """
        Insert a new Link unless ``code`` is already taken.

        Returns:
            The persisted Link, or None if the code already exists
        """
        pass

    @abstractmethod
    async def increment_and_fetch(self, code: str) -> Optional[str]:
        """
        Count one visit and stamp last_clicked_at in a single statement.

        Returns:
            The target URL, or None if no Link has this code
        """
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Link]:
        pass

    @abstractmethod
    async def list_all(self) -> list[Link]:
        """All Links, newest first."""
        pass

    @abstractmethod
    async def delete_by_code(self, code: str) -> None:
        """Delete the Link with ``code``; a missing code is not an error."""
        pass
