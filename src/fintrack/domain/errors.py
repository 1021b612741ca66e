"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``kind`` is the name reported
    to callers of the tracker facade.
    """

    kind = "DomainError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def details(self) -> dict[str, str]:
        """Extra structured data for typed results."""
        return {}


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = "ValidationError"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = "NotFound"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    kind = "Conflict"


class DuplicateNameError(ConflictError):
    """A name is already taken within its scope."""

    kind = "DuplicateName"


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    kind = "Dependency"


class BudgetExceededError(DomainError):
    """Attributing an expense would push a budget over its amount."""

    kind = "BudgetExceeded"

    def __init__(self, budget_id: str, budget_name: str, remaining: Decimal, amount: Decimal):
        super().__init__(budget_exceeded(budget_name, remaining, amount), field="budget_id")
        self.budget_id = budget_id
        self.remaining = remaining
        self.amount = amount

    def details(self) -> dict[str, str]:
        return {
            "budget_id": self.budget_id,
            "remaining": f"{self.remaining:.2f}",
            "amount": f"{self.amount:.2f}",
        }


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_ref: str) -> str:
    """Return message for missing category by id or name."""
    return f"Category '{category_ref}' not found"


def budget_not_found(budget_id: str) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_category_name(name: str, category_type: str) -> str:
    """Return message for duplicate category name within a type."""
    return f"{category_type} category '{name}' already exists"


def budget_exceeded(budget_name: str, remaining: Decimal, amount: Decimal) -> str:
    """Return message when an expense does not fit in the budget headroom."""
    remaining = max(remaining, Decimal("0"))
    return (
        f"Budget '{budget_name}' has only ${remaining:,.2f} remaining; "
        f"cannot add ${amount:,.2f}"
    )


def delete_blocked(entity: str, name: str, transaction_count: int, budget_count: int = 0) -> str:
    """Return message when an entity still has dependent transactions or budgets."""
    parts = []
    if transaction_count > 0:
        parts.append(f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}")
    if budget_count > 0:
        parts.append(f"{budget_count} budget{'s' if budget_count != 1 else ''}")
    return (
        f"Cannot delete {entity} '{name}': it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )
