"""
Database module with abstraction layer.

This module provides:
- LinkStore interface: the operations the link services depend on
- SQLModelLinkStore: SQLAlchemy implementation of LinkStore
- DatabaseAdapter interface plus SQLite (default) and PostgreSQL adapters

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Register it in get_database_adapter() in session.py
"""

from tinylink.db.interface import DatabaseAdapter, LinkStore
from tinylink.db.models import Link
from tinylink.db.session import get_database_adapter
from tinylink.db.store import SQLModelLinkStore

__all__ = [
    "DatabaseAdapter",
    "Link",
    "LinkStore",
    "SQLModelLinkStore",
    "get_database_adapter",
]
