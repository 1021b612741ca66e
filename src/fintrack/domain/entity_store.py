"""In-memory entity collections backed by a blob store.

The entity store owns every Account, Category, Budget and Transaction.
Collections keep insertion order. All writes happen inside a unit of work:
on success the touched collections are flushed to the blob store in one
``save_many`` call, on any exception the in-memory collections are rolled
back to the snapshot taken when the outermost unit began.
"""

from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator, Optional

import structlog

from fintrack.database.base import BlobStore, ACCOUNTS, CATEGORIES, BUDGETS, TRANSACTIONS, COLLECTION_KEYS
from fintrack.database import mappers
from fintrack.domain.entities import Account, Category, CategoryType, Budget, Transaction, ALL_CATEGORIES

logger = structlog.get_logger(__name__)


class EntityStore:
    """Owner of all entity collections."""

    def __init__(self, blob_store: BlobStore):
        """Initialize an empty entity store.

        Args:
            blob_store: Persistent key-value store the collections live in
        """
        self.blob_store = blob_store
        self._collections: dict[str, dict[str, Any]] = {key: {} for key in COLLECTION_KEYS}
        self._dirty: set[str] = set()
        self._depth = 0
        self._snapshot: Optional[dict[str, dict[str, Any]]] = None
        self._dirty_before: set[str] = set()

    def load(self) -> None:
        """Load every collection from the blob store, replacing in-memory state."""
        for key in COLLECTION_KEYS:
            _, to_domain = mappers.RECORD_MAPPERS[key]
            records = self.blob_store.load(key) or []
            self._collections[key] = {}
            for record in records:
                entity = to_domain(record)
                self._collections[key][entity.id] = entity
        self._dirty.clear()
        self._translate_budget_category_names()
        logger.debug(
            "collections_loaded",
            **{key: len(self._collections[key]) for key in COLLECTION_KEYS},
        )

    def _translate_budget_category_names(self) -> None:
        """Rewrite budgets that reference their category by name to use the id."""
        categories = self._collections[CATEGORIES]
        by_name = {}
        # Expense categories first so they win a name shared with an Income one
        for category in sorted(categories.values(), key=lambda c: c.category_type != CategoryType.EXPENSE):
            by_name.setdefault(category.name, category.id)
        for budget_id, budget in list(self._collections[BUDGETS].items()):
            ref = budget.category_id
            if ref == ALL_CATEGORIES or ref in categories or ref not in by_name:
                continue
            self._collections[BUDGETS][budget_id] = replace(budget, category_id=by_name[ref])
            self._dirty.add(BUDGETS)

    @contextmanager
    def unit_of_work(self) -> Iterator["EntityStore"]:
        """Group writes so they become visible and persistent all at once.

        Units nest; only the outermost one snapshots and flushes.
        """
        if self._depth == 0:
            self._snapshot = {key: dict(coll) for key, coll in self._collections.items()}
            self._dirty_before = set(self._dirty)
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.flush()
        except BaseException:
            if self._depth == 1:
                self._rollback()
            raise
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._snapshot = None

    @property
    def in_unit_of_work(self) -> bool:
        return self._depth > 0

    def _rollback(self) -> None:
        if self._snapshot is not None:
            self._collections = self._snapshot
            self._dirty = self._dirty_before
            logger.debug("unit_of_work_rolled_back")

    def flush(self) -> None:
        """Persist every collection touched since the last flush."""
        if not self._dirty:
            return
        payload = {}
        for key in COLLECTION_KEYS:
            if key in self._dirty:
                to_record, _ = mappers.RECORD_MAPPERS[key]
                payload[key] = [to_record(entity) for entity in self._collections[key].values()]
        self.blob_store.save_many(payload)
        logger.debug("collections_flushed", keys=sorted(payload))
        self._dirty.clear()

    # Generic collection access
    def _get(self, key: str, entity_id: Optional[str]) -> Optional[Any]:
        if entity_id is None:
            return None
        return self._collections[key].get(entity_id)

    def _put(self, key: str, entity: Any) -> None:
        with self.unit_of_work():
            self._collections[key][entity.id] = entity
            self._dirty.add(key)

    def _remove(self, key: str, entity_id: str) -> None:
        with self.unit_of_work():
            del self._collections[key][entity_id]
            self._dirty.add(key)

    # Account operations
    def get_account(self, account_id: Optional[str]) -> Optional[Account]:
        return self._get(ACCOUNTS, account_id)

    def list_accounts(self) -> list[Account]:
        return list(self._collections[ACCOUNTS].values())

    def put_account(self, account: Account) -> None:
        self._put(ACCOUNTS, account)

    def remove_account(self, account_id: str) -> None:
        self._remove(ACCOUNTS, account_id)

    # Category operations
    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        return self._get(CATEGORIES, category_id)

    def list_categories(self) -> list[Category]:
        return list(self._collections[CATEGORIES].values())

    def put_category(self, category: Category) -> None:
        self._put(CATEGORIES, category)

    def remove_category(self, category_id: str) -> None:
        self._remove(CATEGORIES, category_id)

    # Budget operations
    def get_budget(self, budget_id: Optional[str]) -> Optional[Budget]:
        return self._get(BUDGETS, budget_id)

    def list_budgets(self) -> list[Budget]:
        return list(self._collections[BUDGETS].values())

    def put_budget(self, budget: Budget) -> None:
        self._put(BUDGETS, budget)

    def remove_budget(self, budget_id: str) -> None:
        self._remove(BUDGETS, budget_id)

    # Transaction operations
    def get_transaction(self, transaction_id: Optional[str]) -> Optional[Transaction]:
        return self._get(TRANSACTIONS, transaction_id)

    def list_transactions(self) -> list[Transaction]:
        return list(self._collections[TRANSACTIONS].values())

    def put_transaction(self, transaction: Transaction) -> None:
        self._put(TRANSACTIONS, transaction)

    def remove_transaction(self, transaction_id: str) -> None:
        self._remove(TRANSACTIONS, transaction_id)
