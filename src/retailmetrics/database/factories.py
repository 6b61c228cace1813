"""Data source factory functions."""

import os
from pathlib import Path
from typing import Optional

from retailmetrics.database.snapshot import SnapshotDataSource
from retailmetrics.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks RETAILMETRICS_DB_PATH
            environment variable, then defaults to ~/.retailmetrics/retailmetrics.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("RETAILMETRICS_DB_PATH")

    if database_path is None:
        # Default to ~/.retailmetrics/retailmetrics.db
        db_dir = Path.home() / ".retailmetrics"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "retailmetrics.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def open_snapshot(snapshot_path: str) -> SnapshotDataSource:
    """Create a read-only data source over a JSON export file."""
    return SnapshotDataSource(path=snapshot_path)
