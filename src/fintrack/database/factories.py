"""Store factory functions for creating blob store instances."""

import os
from pathlib import Path
from typing import Optional

from fintrack.database.memory import InMemoryBlobStore
from fintrack.database.sqlalchemy_db import SQLAlchemyBlobStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyBlobStore:
    """Create a SQLite-backed blob store.

    Args:
        database_path: Path to SQLite database file. If None, checks FINTRACK_DB_PATH
            environment variable, then defaults to ~/.fintrack/fintrack.db

    Returns:
        SQLAlchemyBlobStore instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("FINTRACK_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".fintrack"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "fintrack.db")

    return SQLAlchemyBlobStore(f"sqlite:///{database_path}")


def create_memory_store() -> InMemoryBlobStore:
    """Create an empty in-memory blob store."""
    return InMemoryBlobStore()
