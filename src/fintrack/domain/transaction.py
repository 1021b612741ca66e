"""Transaction domain service.

Every mutation moves through Idle -> Validating -> Committing -> Idle, or
ends in Rejected when validation fails. Account balance, budget spend and
the transaction row change together inside one unit of work, so a rejected
operation leaves nothing behind.
"""

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Union

import structlog

from fintrack.domain.breakdown import check_breakdown
from fintrack.domain.budget_matcher import budget_covers, find_candidates, resolve_category_reference
from fintrack.domain.commands import (
    CreateTransactionCommand,
    CreateRecurringTransactionCommand,
    UpdateTransactionCommand,
    DeleteTransactionCommand,
    TransactionCommand,
)
from fintrack.domain.entities import (
    ALL_CATEGORIES,
    Budget,
    BudgetType,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import (
    DomainError,
    ValidationError,
    NotFoundError,
    account_not_found,
    budget_not_found,
    category_not_found,
    transaction_not_found,
)
from fintrack.domain.recurrence import expand_transaction, recurrence_frequency
from fintrack.domain.spend_ledger import SpendLedger
from fintrack.utils.amount_parser import positive_amount
from fintrack.utils.clock import Clock, IdGenerator
from fintrack.utils.date_parser import start_of_month, end_of_month

logger = structlog.get_logger(__name__)


class MutatorState(str, Enum):
    IDLE = "Idle"
    VALIDATING = "Validating"
    COMMITTING = "Committing"
    REJECTED = "Rejected"


class TransactionService:
    """Service for creating, editing and deleting transactions."""

    def __init__(self, store: EntityStore, clock: Clock, ids: IdGenerator):
        """Initialize transaction service.

        Args:
            store: Entity store owning all collections
            clock: Source of timestamps and the current month
            ids: Identifier generator for new transactions and budgets
        """
        self.store = store
        self.clock = clock
        self.ids = ids
        self.ledger = SpendLedger(store)
        self.state = MutatorState.IDLE

    @contextmanager
    def _operation(self, action: str, **context) -> Iterator[None]:
        self.state = MutatorState.VALIDATING
        try:
            with self.store.unit_of_work():
                yield
        except DomainError as e:
            self.state = MutatorState.REJECTED
            logger.warning("transaction_rejected", action=action, kind=e.kind, error=e.message, **context)
            raise
        except Exception:
            self.state = MutatorState.IDLE
            raise
        self.state = MutatorState.IDLE

    def execute(self, command: TransactionCommand) -> Union[Transaction, list[Transaction]]:
        """Run a transaction command.

        Returns:
            The created, updated or deleted transaction; a list for recurring creates
        """
        if isinstance(command, CreateTransactionCommand):
            return self.create_transaction(command.draft)
        if isinstance(command, CreateRecurringTransactionCommand):
            return self.create_recurring_transaction(command.draft)
        if isinstance(command, UpdateTransactionCommand):
            return self.update_transaction(command.transaction_id, command.draft)
        if isinstance(command, DeleteTransactionCommand):
            return self.delete_transaction(command.transaction_id)
        raise TypeError(f"Unsupported command: {type(command).__name__}")

    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        """Create a single transaction.

        A recurring draft is stored as one occurrence; use
        ``create_recurring_transaction`` to expand it.

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the account, category or budget doesn't exist
            BudgetExceededError: If the chosen budget can't absorb the amount
        """
        with self._operation("create"):
            txn = self._apply(draft, old=None)
        logger.info(
            "transaction_created",
            transaction_id=txn.id,
            type=txn.transaction_type.value,
            amount=str(txn.amount),
            budget_id=txn.budget_id,
        )
        return txn

    def create_recurring_transaction(self, draft: TransactionDraft) -> list[Transaction]:
        """Expand a recurring template and create every occurrence.

        Occurrences are created in date order inside one unit of work. The
        first failing occurrence rejects the whole series and nothing is
        stored.
        """
        with self._operation("create_recurring"):
            occurrences = expand_transaction(draft)
            created = [self._apply(occurrence, old=None) for occurrence in occurrences]
        frequency = created[0].recurrence_frequency if created else None
        logger.info(
            "recurring_transactions_created",
            count=len(created),
            frequency=frequency.value if frequency else None,
        )
        return created

    def update_transaction(self, transaction_id: str, draft: TransactionDraft) -> Transaction:
        """Replace a transaction's fields, keeping its id and creation time.

        The old transaction's effects are reversed and the new ones applied in
        one step, so an edit that changes nothing financial leaves balances
        and budgets untouched.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        with self._operation("update", transaction_id=transaction_id):
            old = self.store.get_transaction(transaction_id)
            if old is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            txn = self._apply(draft, old=old)
        logger.info("transaction_updated", transaction_id=txn.id, amount=str(txn.amount), budget_id=txn.budget_id)
        return txn

    def delete_transaction(self, transaction_id: str) -> Transaction:
        """Delete a transaction and reverse its balance and budget effects.

        Returns:
            The deleted transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        with self._operation("delete", transaction_id=transaction_id):
            old = self.store.get_transaction(transaction_id)
            if old is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            deltas = self.ledger.plan(old, None)
            self.state = MutatorState.COMMITTING
            self._adjust_balance(old.account_id, -old.balance_delta)
            self.ledger.commit(old, None, deltas)
            self._clear_budget_references(old.id)
            self.store.remove_transaction(old.id)
        logger.info("transaction_deleted", transaction_id=transaction_id)
        return old

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.store.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        budget_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions with filters, newest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            account_id: Optional account ID filter
            category_id: Optional category ID filter
            budget_id: Optional budget ID filter
            transaction_type: Optional type filter

        Returns:
            List of transaction entities
        """
        result = []
        for txn in self.store.list_transactions():
            if start_date is not None and txn.date < start_date:
                continue
            if end_date is not None and txn.date > end_date:
                continue
            if account_id is not None and txn.account_id != account_id:
                continue
            if category_id is not None and txn.category_id != category_id:
                continue
            if budget_id is not None and txn.budget_id != budget_id:
                continue
            if transaction_type is not None and txn.transaction_type != transaction_type:
                continue
            result.append(txn)
        return sorted(result, key=lambda t: (t.date, t.created_at), reverse=True)

    def _apply(self, draft: TransactionDraft, old: Optional[Transaction]) -> Transaction:
        """Validate ``draft`` and commit it, replacing ``old`` when given."""
        now = self.clock.now()
        txn = self._build(draft, old, now)

        if txn.is_expense and txn.budget_id is None and draft.auto_budget:
            txn = replace(txn, budget_id=self._auto_budget(txn).id)

        deltas = self.ledger.plan(old, txn)
        self.ledger.check_headroom(txn.budget_id, old, deltas)

        self.state = MutatorState.COMMITTING
        if old is not None:
            self._adjust_balance(old.account_id, -old.balance_delta)
        self._adjust_balance(txn.account_id, txn.balance_delta)
        self.ledger.commit(old, txn, deltas)
        self.store.put_transaction(txn)
        return txn

    def _build(self, draft: TransactionDraft, old: Optional[Transaction], now: datetime) -> Transaction:
        """Validate a draft and turn it into a transaction entity."""
        if draft.date is None:
            raise ValidationError("Date is required", field="date")

        try:
            transaction_type = TransactionType(draft.transaction_type)
        except ValueError:
            raise ValidationError(f"Unknown transaction type: {draft.transaction_type}", field="type")

        amount = positive_amount(draft.amount)
        if amount is None:
            raise ValidationError("Amount must be greater than 0", field="amount")

        if self.store.get_account(draft.account_id) is None:
            raise NotFoundError(account_not_found(draft.account_id), field="account_id")

        categories = self.store.list_categories()
        category_id = resolve_category_reference(draft.category_id, categories)
        if category_id is None or category_id == ALL_CATEGORIES:
            raise NotFoundError(category_not_found(draft.category_id), field="category_id")

        frequency = None
        if draft.is_recurring:
            frequency = recurrence_frequency(draft.recurrence_frequency)
            if draft.recurrence_end_date is None:
                raise ValidationError("Recurrence end date is required", field="recurrence_end_date")

        sub_items = check_breakdown(amount, draft.sub_items, confirm_empty=draft.confirm_empty_breakdown)

        if draft.budget_id is not None:
            if transaction_type != TransactionType.EXPENSE:
                raise ValidationError("Only expense transactions can be assigned to a budget", field="budget_id")
            budget = self.store.get_budget(draft.budget_id)
            if budget is None:
                raise NotFoundError(budget_not_found(draft.budget_id), field="budget_id")
            if not budget_covers(budget, draft.date, category_id, categories):
                raise ValidationError(
                    f"Budget '{budget.name}' does not cover this transaction's category and date",
                    field="budget_id",
                )

        return Transaction(
            id=old.id if old is not None else self.ids.new_id(),
            date=draft.date,
            account_id=draft.account_id,
            transaction_type=transaction_type,
            category_id=category_id,
            amount=amount,
            created_at=old.created_at if old is not None else now,
            updated_at=now,
            description=draft.description,
            budget_id=draft.budget_id,
            is_recurring=draft.is_recurring,
            recurrence_frequency=frequency,
            recurrence_end_date=draft.recurrence_end_date if draft.is_recurring else None,
            sub_items=sub_items,
        )

    def _auto_budget(self, txn: Transaction) -> Budget:
        """Find a budget that can absorb ``txn``, creating one if none can.

        A created budget is named after the category, holds twice the
        transaction amount and spans the current month, or the transaction's
        own month when the transaction falls outside the current one.
        """
        categories = self.store.list_categories()
        for budget in find_candidates(self.store.list_budgets(), txn.date, txn.category_id, categories):
            if budget.remaining >= txn.amount:
                return budget

        today = self.clock.now().date()
        anchor = today if start_of_month(today) <= txn.date <= end_of_month(today) else txn.date
        category = self.store.get_category(txn.category_id)
        budget = Budget(
            id=self.ids.new_id(),
            name=f"{category.name} Budget",
            category_id=category.id,
            amount=txn.amount * 2,
            spent=Decimal("0"),
            start_date=start_of_month(anchor),
            end_date=end_of_month(anchor),
            budget_type=BudgetType.ADDED_ONLY,
        )
        self.store.put_budget(budget)
        logger.info("budget_auto_created", budget_id=budget.id, name=budget.name, amount=str(budget.amount))
        return budget

    def _adjust_balance(self, account_id: str, delta: Decimal) -> None:
        if delta == 0:
            return
        account = self.store.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id), field="account_id")
        self.store.put_account(replace(account, balance=account.balance + delta))

    def _clear_budget_references(self, transaction_id: str) -> None:
        for budget in self.store.list_budgets():
            if transaction_id in budget.transaction_ids:
                self.store.put_budget(
                    replace(
                        budget,
                        transaction_ids=tuple(t for t in budget.transaction_ids if t != transaction_id),
                    )
                )
