"""Summary and analytics domain service."""

from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from fintrack.domain.entities import (
    BudgetProgress,
    CategoryShare,
    MonthComparison,
    MonthlyTotal,
    Transaction,
    TransactionType,
)
from fintrack.domain.entity_store import EntityStore
from fintrack.utils.date_parser import add_months, month_key, start_of_month

HUNDRED = Decimal("100")
ONE_DECIMAL = Decimal("0.1")


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part`` as a percentage of ``whole`` rounded to one decimal (0 when whole is 0)."""
    if whole == 0:
        return Decimal("0.0")
    return (part / whole * HUNDRED).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def percent_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Relative change from ``previous`` to ``current``; None without a baseline."""
    if previous == 0:
        return None
    return ((current - previous) / previous * HUNDRED).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


class SummaryService:
    """Service for building derived views over transactions and budgets."""

    def __init__(self, store: EntityStore):
        """Initialize summary service.

        Args:
            store: Entity store owning all collections
        """
        self.store = store

    def get_filtered_transactions(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Transaction]:
        """Get transactions within an optional date range."""
        return [
            txn
            for txn in self.store.list_transactions()
            if (start_date is None or txn.date >= start_date) and (end_date is None or txn.date <= end_date)
        ]

    def monthly_totals(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[MonthlyTotal]:
        """Income and expenses per month, oldest first. Transfers are excluded."""
        return self.aggregate_by_month(self.get_filtered_transactions(start_date, end_date))

    def aggregate_by_month(self, transactions: Sequence[Transaction]) -> list[MonthlyTotal]:
        income: dict[str, Decimal] = defaultdict(Decimal)
        expenses: dict[str, Decimal] = defaultdict(Decimal)
        for txn in transactions:
            key = month_key(txn.date)
            if txn.transaction_type == TransactionType.INCOME:
                income[key] += txn.amount
            elif txn.transaction_type == TransactionType.EXPENSE:
                expenses[key] += txn.amount
        keys = sorted(set(income) | set(expenses))
        return [MonthlyTotal(month=key, income=income[key], expenses=expenses[key]) for key in keys]

    def category_breakdown(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[CategoryShare]:
        """Expense totals per category, largest first, with their share of all expenses."""
        totals: dict[Optional[str], Decimal] = defaultdict(Decimal)
        for txn in self.get_filtered_transactions(start_date, end_date):
            if txn.is_expense:
                totals[txn.category_id] += txn.amount

        grand_total = sum(totals.values(), Decimal("0"))
        results = []
        for category_id, total in totals.items():
            category = self.store.get_category(category_id)
            results.append(
                CategoryShare(
                    category_id=category_id,
                    category_name=category.name if category else "Uncategorized",
                    total=total,
                    percentage=percentage(total, grand_total),
                )
            )
        return sorted(results, key=lambda share: (-share.total, share.category_name))

    def spending_trend(self, months: int, today: date) -> list[MonthlyTotal]:
        """The last ``months`` months up to ``today``'s month, zero-filled, oldest first."""
        first = add_months(start_of_month(today), -(months - 1))
        by_month = {total.month: total for total in self.monthly_totals(start_date=first, end_date=today)}
        trend = []
        for offset in range(months):
            key = month_key(add_months(first, offset))
            trend.append(by_month.get(key, MonthlyTotal(month=key, income=Decimal("0"), expenses=Decimal("0"))))
        return trend

    def month_over_month(self, today: date) -> MonthComparison:
        """Compare the month containing ``today`` with the month before it."""
        previous, current = self.spending_trend(2, today)
        return MonthComparison(
            current=current,
            previous=previous,
            income_change=percent_change(current.income, previous.income),
            expense_change=percent_change(current.expenses, previous.expenses),
            balance_change=percent_change(current.net, previous.income) if previous.income else None,
        )

    def budget_progress(self) -> list[BudgetProgress]:
        """Spend progress for every budget in insertion order."""
        progress = []
        for budget in self.store.list_budgets():
            progress.append(
                BudgetProgress(
                    budget_id=budget.id,
                    name=budget.name,
                    amount=budget.amount,
                    spent=budget.spent,
                    remaining=budget.remaining,
                    percentage=min(percentage(budget.spent, budget.amount), HUNDRED),
                    is_over_budget=budget.spent > budget.amount,
                )
            )
        return progress
