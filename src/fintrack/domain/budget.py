"""Budget domain service."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Union

import structlog

from fintrack.domain.budget_matcher import budget_covers, find_candidates, resolve_category_reference
from fintrack.domain.entities import ALL_CATEGORIES, Budget, BudgetDraft, BudgetType
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import (
    NotFoundError,
    ValidationError,
    budget_not_found,
    category_not_found,
)
from fintrack.domain.recurrence import expand_budget
from fintrack.domain.spend_ledger import SpendLedger
from fintrack.utils.amount_parser import positive_amount
from fintrack.utils.clock import Clock, IdGenerator
from fintrack.utils.date_parser import get_date_range

logger = structlog.get_logger(__name__)

TIMEFRAMES = ("weekly", "monthly", "yearly", "custom")


class BudgetService:
    """Service for managing budgets and their spend."""

    def __init__(self, store: EntityStore, clock: Clock, ids: IdGenerator):
        """Initialize budget service.

        Args:
            store: Entity store owning all collections
            clock: Source of the current date for timeframe defaults
            ids: Identifier generator for new budgets
        """
        self.store = store
        self.clock = clock
        self.ids = ids
        self.ledger = SpendLedger(store)

    def create_budget(self, draft: BudgetDraft) -> list[Budget]:
        """Create a budget, or one budget per month for a recurring draft.

        Spent starts at the recomputed value, so an ``all_transactions``
        budget immediately reflects matching historical expenses.

        Returns:
            Created budgets (a single item unless the draft is recurring)

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the category doesn't exist
        """
        name, category_id, amount, budget_type = self._validate(draft)
        start_date, end_date = self._window(draft)

        template = Budget(
            id=self.ids.new_id(),
            name=name,
            category_id=category_id,
            amount=amount,
            spent=Decimal("0"),
            start_date=start_date,
            end_date=end_date,
            budget_type=budget_type,
        )
        if draft.is_recurring:
            if start_date is None:
                raise ValidationError("A recurring budget needs a start date", field="start_date")
            budgets = expand_budget(template, start_date, draft.number_of_months, self.ids)
        else:
            budgets = [template]

        created = []
        with self.store.unit_of_work():
            for budget in budgets:
                budget = replace(budget, spent=self.ledger.recompute(budget))
                self.store.put_budget(budget)
                created.append(budget)
        logger.info(
            "budgets_created",
            count=len(created),
            name=name,
            parent_budget_id=created[0].parent_budget_id,
        )
        return created

    def update_budget(self, budget_id: str, draft: BudgetDraft) -> Budget:
        """Update a budget's name, category, amount, window and type.

        Transactions attributed to the budget that the new window or category
        no longer covers are detached from it. Spent is recomputed.

        Raises:
            NotFoundError: If the budget or category doesn't exist
            ValidationError: If the new amount is below what is already spent
        """
        budget = self.store.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        name, category_id, amount, budget_type = self._validate(draft)
        start_date, end_date = self._window(draft)

        updated = replace(
            budget,
            name=name,
            category_id=category_id,
            amount=amount,
            start_date=start_date,
            end_date=end_date,
            budget_type=budget_type,
        )
        with self.store.unit_of_work():
            categories = self.store.list_categories()
            kept = []
            for txn_id in updated.transaction_ids:
                txn = self.store.get_transaction(txn_id)
                if txn is None:
                    continue
                if txn.is_expense and budget_covers(updated, txn.date, txn.category_id, categories):
                    kept.append(txn_id)
                else:
                    self.store.put_transaction(replace(txn, budget_id=None))
            updated = replace(updated, transaction_ids=tuple(kept))
            updated = replace(updated, spent=self.ledger.recompute(updated))
            if updated.spent > updated.amount:
                raise ValidationError(
                    f"Budget amount ${amount:,.2f} is below the ${updated.spent:,.2f} already spent",
                    field="amount",
                )
            self.store.put_budget(updated)
        logger.info("budget_updated", budget_id=budget_id, amount=str(amount), spent=str(updated.spent))
        return updated

    def delete_budget(self, budget_ids: Union[str, Iterable[str]]) -> list[Budget]:
        """Delete one or more budgets.

        Transactions attributed to a deleted budget keep existing but lose
        their budget reference.

        Raises:
            NotFoundError: If any budget doesn't exist (nothing is deleted)
        """
        if isinstance(budget_ids, str):
            budget_ids = [budget_ids]
        ids = list(dict.fromkeys(budget_ids))
        budgets = []
        for budget_id in ids:
            budget = self.store.get_budget(budget_id)
            if budget is None:
                raise NotFoundError(budget_not_found(budget_id))
            budgets.append(budget)

        with self.store.unit_of_work():
            for txn in self.store.list_transactions():
                if txn.budget_id in ids:
                    self.store.put_transaction(replace(txn, budget_id=None))
            for budget_id in ids:
                self.store.remove_budget(budget_id)
        logger.info("budgets_deleted", budget_ids=ids)
        return budgets

    def recompute_budget_spent(self, budget_id: str) -> Budget:
        """Repair one budget's spent from the transaction collection."""
        with self.store.unit_of_work():
            return self.ledger.repair(budget_id)

    def recompute_all(self) -> list[Budget]:
        """Repair every budget's spent."""
        with self.store.unit_of_work():
            return [self.ledger.repair(budget.id) for budget in self.store.list_budgets()]

    def find_candidates(self, transaction_date: date, category: str) -> list[Budget]:
        """Budgets that could take an expense on ``transaction_date`` in ``category``.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        categories = self.store.list_categories()
        category_id = resolve_category_reference(category, categories)
        if category_id is None or category_id == ALL_CATEGORIES:
            raise NotFoundError(category_not_found(category), field="category_id")
        return find_candidates(self.store.list_budgets(), transaction_date, category_id, categories)

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        """Get budget by ID."""
        return self.store.get_budget(budget_id)

    def list_budgets(self, parent_budget_id: Optional[str] = None) -> list[Budget]:
        """List budgets in insertion order, optionally only one recurring series."""
        return [
            budget
            for budget in self.store.list_budgets()
            if parent_budget_id is None or budget.parent_budget_id == parent_budget_id
        ]

    def _validate(self, draft: BudgetDraft) -> tuple[str, str, Decimal, BudgetType]:
        name = (draft.name or "").strip()
        if not name:
            raise ValidationError("Budget name is required", field="name")
        amount = positive_amount(draft.amount)
        if amount is None:
            raise ValidationError("Budget amount must be greater than 0", field="amount")
        try:
            budget_type = BudgetType(draft.budget_type)
        except ValueError:
            raise ValidationError(f"Unknown budget type: {draft.budget_type}", field="budget_type")
        if not draft.category:
            raise ValidationError("Category is required", field="category")
        category_id = resolve_category_reference(draft.category, self.store.list_categories())
        if category_id is None:
            raise NotFoundError(category_not_found(draft.category), field="category")
        return name, category_id, amount, budget_type

    def _window(self, draft: BudgetDraft) -> tuple[Optional[date], Optional[date]]:
        timeframe = (draft.timeframe or "custom").lower()
        if timeframe not in TIMEFRAMES:
            raise ValidationError(f"Unknown timeframe: {draft.timeframe}", field="timeframe")
        if timeframe == "custom":
            start_date, end_date = draft.start_date, draft.end_date
        else:
            anchor = draft.start_date or self.clock.now().date()
            start_date, end_date = get_date_range(timeframe, today=anchor)
        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot be earlier than start date", field="end_date")
        return start_date, end_date
