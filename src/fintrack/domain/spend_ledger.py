"""Budget spend accounting.

Recompute is the ground truth: a budget's ``spent`` is the sum of the
expense transactions that count toward it. The incremental path used by the
transaction service computes per-budget deltas for a change from an old
transaction state to a new one, so both paths agree after any sequence of
creates, edits and deletes.
"""

from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import structlog

from fintrack.domain.budget_matcher import budget_covers
from fintrack.domain.entities import Budget, BudgetType, Category, Transaction
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import BudgetExceededError, NotFoundError, budget_not_found

logger = structlog.get_logger(__name__)


def counts_toward(budget: Budget, transaction: Transaction, categories: Sequence[Category]) -> bool:
    """Return True if ``transaction`` contributes to ``budget.spent``."""
    if not transaction.is_expense:
        return False
    if not budget_covers(budget, transaction.date, transaction.category_id, categories):
        return False
    if budget.budget_type == BudgetType.ADDED_ONLY:
        return transaction.budget_id == budget.id
    return True


def recompute_spent(
    budget: Budget, transactions: Iterable[Transaction], categories: Sequence[Category]
) -> Decimal:
    """Sum the amounts of all transactions that count toward ``budget``."""
    return sum(
        (txn.amount for txn in transactions if counts_toward(budget, txn, categories)),
        Decimal("0"),
    )


class SpendLedger:
    """Keeps ``Budget.spent`` consistent with the transaction collection."""

    def __init__(self, store: EntityStore):
        self.store = store

    def contributions(self, transaction: Optional[Transaction]) -> list[Budget]:
        """Budgets whose spend includes ``transaction``."""
        if transaction is None or not transaction.is_expense:
            return []
        categories = self.store.list_categories()
        return [
            budget
            for budget in self.store.list_budgets()
            if counts_toward(budget, transaction, categories)
        ]

    def plan(
        self, old: Optional[Transaction], new: Optional[Transaction]
    ) -> dict[str, Decimal]:
        """Per-budget spend deltas for replacing ``old`` with ``new``.

        ``old=None`` is a create, ``new=None`` a delete.
        """
        deltas: dict[str, Decimal] = defaultdict(Decimal)
        for budget in self.contributions(old):
            deltas[budget.id] -= old.amount
        for budget in self.contributions(new):
            deltas[budget.id] += new.amount
        return {budget_id: delta for budget_id, delta in deltas.items() if delta != 0}

    def check_headroom(
        self, budget_id: Optional[str], old: Optional[Transaction], deltas: dict[str, Decimal]
    ) -> None:
        """Reject a change that pushes the named budget over its amount.

        Only a change that increases the budget's spend can be rejected, so an
        edit with no net effect always passes.

        Raises:
            BudgetExceededError: If the new spent would exceed the budget amount
        """
        if budget_id is None:
            return
        budget = self.store.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id), field="budget_id")
        delta = deltas.get(budget_id, Decimal("0"))
        new_spent = budget.spent + delta
        if delta > 0 and new_spent > budget.amount:
            released = Decimal("0")
            if old is not None and any(b.id == budget_id for b in self.contributions(old)):
                released = old.amount
            raise BudgetExceededError(
                budget_id=budget.id,
                budget_name=budget.name,
                remaining=budget.remaining + released,
                amount=delta + released,
            )

    def commit(
        self, old: Optional[Transaction], new: Optional[Transaction], deltas: dict[str, Decimal]
    ) -> list[Budget]:
        """Write spend deltas and attribution changes. Returns touched budgets."""
        touched: dict[str, Budget] = {}
        for budget_id, delta in deltas.items():
            budget = self.store.get_budget(budget_id)
            touched[budget_id] = replace(budget, spent=budget.spent + delta)

        old_link = (old.budget_id, old.id) if old is not None else (None, None)
        new_link = (new.budget_id, new.id) if new is not None else (None, None)
        if old_link != new_link:
            if old_link[0] is not None:
                budget = touched.get(old_link[0]) or self.store.get_budget(old_link[0])
                if budget is not None:
                    touched[budget.id] = replace(
                        budget,
                        transaction_ids=tuple(t for t in budget.transaction_ids if t != old_link[1]),
                    )
            if new_link[0] is not None:
                budget = touched.get(new_link[0]) or self.store.get_budget(new_link[0])
                if new_link[1] not in budget.transaction_ids:
                    touched[budget.id] = replace(
                        budget, transaction_ids=budget.transaction_ids + (new_link[1],)
                    )

        for budget in touched.values():
            self.store.put_budget(budget)
        return list(touched.values())

    def recompute(self, budget: Budget) -> Decimal:
        """Ground-truth spend for ``budget``."""
        return recompute_spent(budget, self.store.list_transactions(), self.store.list_categories())

    def repair(self, budget_id: str) -> Budget:
        """Overwrite a budget's spent with the recomputed value.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self.store.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id), field="budget_id")
        spent = self.recompute(budget)
        if spent != budget.spent:
            logger.info("budget_spent_repaired", budget_id=budget_id, before=str(budget.spent), after=str(spent))
            budget = replace(budget, spent=spent)
            self.store.put_budget(budget)
        return budget

    def drift(self) -> dict[str, tuple[Decimal, Decimal]]:
        """Budgets whose stored spent differs from recompute, as (stored, recomputed)."""
        result = {}
        for budget in self.store.list_budgets():
            expected = self.recompute(budget)
            if expected != budget.spent:
                result[budget.id] = (budget.spent, expected)
        return result
