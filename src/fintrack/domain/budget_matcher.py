"""Budget matching: which budgets can absorb a transaction."""

from datetime import date
from typing import Iterable, Optional, Sequence

from fintrack.domain.entities import Budget, Category, ALL_CATEGORIES


def resolve_category_reference(reference: Optional[str], categories: Iterable[Category]) -> Optional[str]:
    """Translate a category id or name to the category id.

    ``ALL_CATEGORIES`` is returned unchanged. Ids win over names when a
    reference happens to be both.

    Returns:
        Category id, ``ALL_CATEGORIES``, or None if nothing matches
    """
    if reference is None:
        return None
    if reference == ALL_CATEGORIES:
        return ALL_CATEGORIES
    categories = list(categories)
    for category in categories:
        if category.id == reference:
            return category.id
    for category in categories:
        if category.name == reference:
            return category.id
    return None


def budget_covers(
    budget: Budget, transaction_date: date, category_id: str, categories: Sequence[Category]
) -> bool:
    """Return True if the budget's window and category cover the transaction.

    Headroom is not considered.
    """
    if not budget.covers_date(transaction_date):
        return False
    if budget.category_id == ALL_CATEGORIES:
        return True
    return resolve_category_reference(budget.category_id, categories) == category_id


def find_candidates(
    budgets: Iterable[Budget],
    transaction_date: date,
    category_id: str,
    categories: Sequence[Category],
) -> list[Budget]:
    """Find budgets that could take a transaction.

    A budget matches when the date falls in its window (missing bounds are
    open), its category is ``all`` or resolves to ``category_id``, and it
    still has headroom (``amount > spent``). Results keep the order of
    ``budgets``.
    """
    return [
        budget
        for budget in budgets
        if budget_covers(budget, transaction_date, category_id, categories)
        and budget.amount > budget.spent
    ]
