"""Application boundary for fintrack.

``FinanceTracker`` wires the domain services to one entity store and turns
their typed exceptions into ``OperationResult`` values, so callers such as
the CLI never see a raised ``DomainError``.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import date
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar, Union

import structlog

from fintrack.database.base import BlobStore
from fintrack.domain.account import AccountService
from fintrack.domain.budget import BudgetService
from fintrack.domain.category import CategoryService
from fintrack.domain.entities import (
    Account,
    AccountType,
    Budget,
    BudgetDraft,
    Category,
    CategoryType,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import DomainError
from fintrack.domain.summary import SummaryService
from fintrack.domain.transaction import TransactionService
from fintrack.utils.clock import Clock, IdGenerator, SystemClock, UUIDGenerator

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    """Structured description of a rejected operation."""

    kind: str
    message: str
    field: Optional[str] = None
    details: dict[str, Any] = dataclass_field(default_factory=dict)

    @classmethod
    def from_error(cls, error: DomainError) -> "ErrorInfo":
        return cls(kind=error.kind, message=error.message, field=error.field, details=error.details())


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a mutation: ``value`` when ``ok``, otherwise ``error``."""

    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorInfo) -> "OperationResult[T]":
        return cls(ok=False, error=error)


class FinanceTracker:
    """Facade over the domain services sharing one entity store."""

    def __init__(
        self,
        blob_store: BlobStore,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        """Load all collections from ``blob_store`` and build the services.

        Args:
            blob_store: Persistent store holding the four collections
            clock: Source of the current time (system clock by default)
            ids: Identifier generator (UUID4 by default)
        """
        self.clock = clock or SystemClock()
        self.ids = ids or UUIDGenerator()
        self.store = EntityStore(blob_store)
        self.store.load()

        self.accounts = AccountService(self.store, self.ids)
        self.categories = CategoryService(self.store, self.ids)
        self.budgets = BudgetService(self.store, self.clock, self.ids)
        self.transactions = TransactionService(self.store, self.clock, self.ids)
        self.summary = SummaryService(self.store)

    def _run(self, operation: Callable[..., T], *args, **kwargs) -> OperationResult[T]:
        try:
            return OperationResult.success(operation(*args, **kwargs))
        except DomainError as e:
            logger.debug("operation_rejected", operation=operation.__name__, kind=e.kind, field=e.field)
            return OperationResult.failure(ErrorInfo.from_error(e))

    def today(self) -> date:
        return self.clock.now().date()

    # Transactions

    def create_transaction(
        self, draft: TransactionDraft
    ) -> OperationResult[Union[Transaction, list[Transaction]]]:
        """Create a transaction; a recurring draft creates the whole series."""
        if draft.is_recurring:
            return self._run(self.transactions.create_recurring_transaction, draft)
        return self._run(self.transactions.create_transaction, draft)

    def create_recurring_transaction(self, draft: TransactionDraft) -> OperationResult[list[Transaction]]:
        return self._run(self.transactions.create_recurring_transaction, draft)

    def update_transaction(self, transaction_id: str, draft: TransactionDraft) -> OperationResult[Transaction]:
        return self._run(self.transactions.update_transaction, transaction_id, draft)

    def delete_transaction(self, transaction_id: str) -> OperationResult[Transaction]:
        return self._run(self.transactions.delete_transaction, transaction_id)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.transactions.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        budget_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        return self.transactions.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            budget_id=budget_id,
            transaction_type=transaction_type,
        )

    # Budgets

    def create_budget(self, draft: BudgetDraft) -> OperationResult[list[Budget]]:
        return self._run(self.budgets.create_budget, draft)

    def update_budget(self, budget_id: str, draft: BudgetDraft) -> OperationResult[Budget]:
        return self._run(self.budgets.update_budget, budget_id, draft)

    def delete_budget(self, budget_ids: Union[str, Iterable[str]]) -> OperationResult[list[Budget]]:
        return self._run(self.budgets.delete_budget, budget_ids)

    def recompute_budget_spent(self, budget_id: str) -> OperationResult[Budget]:
        """Repair one budget's spent from its transactions."""
        return self._run(self.budgets.recompute_budget_spent, budget_id)

    def recompute_all_budgets(self) -> OperationResult[list[Budget]]:
        return self._run(self.budgets.recompute_all)

    def find_budget_candidates(self, transaction_date: date, category: str) -> OperationResult[list[Budget]]:
        return self._run(self.budgets.find_candidates, transaction_date, category)

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        return self.budgets.get_budget(budget_id)

    def list_budgets(self, parent_budget_id: Optional[str] = None) -> list[Budget]:
        return self.budgets.list_budgets(parent_budget_id=parent_budget_id)

    # Accounts

    def create_account(
        self,
        name: str,
        account_type: AccountType = AccountType.BANK,
        balance=0,
        currency: str = "USD",
    ) -> OperationResult[Account]:
        return self._run(self.accounts.create_account, name, account_type, balance, currency)

    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        currency: Optional[str] = None,
    ) -> OperationResult[Account]:
        return self._run(self.accounts.update_account, account_id, name, account_type, currency)

    def delete_account(self, account_id: str) -> OperationResult[Account]:
        return self._run(self.accounts.delete_account, account_id)

    def get_account(self, account_id: str) -> Optional[Account]:
        return self.accounts.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        return self.accounts.list_accounts()

    # Categories

    def create_category(
        self, name: str, category_type: CategoryType = CategoryType.EXPENSE
    ) -> OperationResult[Category]:
        return self._run(self.categories.create_category, name, category_type)

    def rename_category(self, category_id: str, name: str) -> OperationResult[Category]:
        return self._run(self.categories.rename_category, category_id, name)

    def delete_category(self, category_id: str) -> OperationResult[Category]:
        return self._run(self.categories.delete_category, category_id)

    def seed_default_categories(self) -> OperationResult[list[Category]]:
        return self._run(self.categories.seed_defaults)

    def resolve_category(self, reference: str) -> OperationResult[Category]:
        return self._run(self.categories.resolve, reference)

    def list_categories(self, category_type: Optional[CategoryType] = None) -> list[Category]:
        return self.categories.list_categories(category_type)

    # Analytics

    def monthly_totals(self, start_date: Optional[date] = None, end_date: Optional[date] = None):
        return self.summary.monthly_totals(start_date, end_date)

    def category_breakdown(self, start_date: Optional[date] = None, end_date: Optional[date] = None):
        return self.summary.category_breakdown(start_date, end_date)

    def spending_trend(self, months: int = 6):
        return self.summary.spending_trend(months, self.today())

    def month_over_month(self):
        return self.summary.month_over_month(self.today())

    def budget_progress(self):
        return self.summary.budget_progress()

    def close(self) -> None:
        self.store.blob_store.disconnect()
