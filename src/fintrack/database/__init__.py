"""Persistence layer for fintrack."""

from fintrack.database.base import (
    BlobStore,
    ACCOUNTS,
    CATEGORIES,
    BUDGETS,
    TRANSACTIONS,
    COLLECTION_KEYS,
)
from fintrack.database.factories import create_sqlite_store, create_memory_store

__all__ = [
    "BlobStore",
    "ACCOUNTS",
    "CATEGORIES",
    "BUDGETS",
    "TRANSACTIONS",
    "COLLECTION_KEYS",
    "create_sqlite_store",
    "create_memory_store",
]
