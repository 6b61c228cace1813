"""Database layer for retailmetrics application."""

from retailmetrics.database.base import DataSource, Database
from retailmetrics.database.factories import create_sqlite_database, open_snapshot

__all__ = ["DataSource", "Database", "create_sqlite_database", "open_snapshot"]
