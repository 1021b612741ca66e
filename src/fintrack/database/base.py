"""Abstract persistent store interface.

The store is a flat key-value namespace of JSON-compatible blobs, one blob
per entity collection. It offers no cross-key transactions beyond
``save_many``; the entity store sequences its own multi-key writes.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any

ACCOUNTS = "accounts"
CATEGORIES = "categories"
BUDGETS = "budgets"
TRANSACTIONS = "transactions"

COLLECTION_KEYS = (ACCOUNTS, CATEGORIES, BUDGETS, TRANSACTIONS)


class BlobStore(ABC):
    """Abstract key-value blob store for fintrack collections."""

    @abstractmethod
    def connect(self) -> None:
        """Open the underlying storage."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying storage."""
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the JSON value stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under ``key``, replacing any previous one."""
        pass

    def save_many(self, items: dict[str, Any]) -> None:
        """Store several keys.

        Backends that can write all keys in one transaction override this.
        """
        for key, value in items.items():
            self.save(key, value)
