"""Mapper functions to convert between domain entities and stored records.

Records are the JSON objects kept in each collection blob. Keys are
camelCase, dates are ISO strings and money is a decimal string; plain
numbers are accepted on load for blobs written by older clients.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from fintrack.database.base import ACCOUNTS, CATEGORIES, BUDGETS, TRANSACTIONS
from fintrack.domain import entities as domain
from fintrack.utils.amount_parser import to_money


def _money(value: Any) -> Decimal:
    return to_money(value if value is not None else 0)


def _date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    # Older blobs carry full ISO timestamps for date fields
    return date.fromisoformat(value[:10])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def account_to_record(account: domain.Account) -> dict[str, Any]:
    """Convert domain Account entity to a stored record."""
    return {
        "id": account.id,
        "name": account.name,
        "type": account.account_type.value,
        "balance": str(account.balance),
        "currency": account.currency,
    }


def account_to_domain(record: dict[str, Any]) -> domain.Account:
    """Convert stored record to domain Account entity."""
    return domain.Account(
        id=record["id"],
        name=record["name"],
        account_type=domain.AccountType(record.get("type", domain.AccountType.OTHER.value)),
        balance=_money(record.get("balance")),
        currency=record.get("currency") or "USD",
    )


def category_to_record(category: domain.Category) -> dict[str, Any]:
    """Convert domain Category entity to a stored record."""
    return {
        "id": category.id,
        "name": category.name,
        "type": category.category_type.value,
    }


def category_to_domain(record: dict[str, Any]) -> domain.Category:
    """Convert stored record to domain Category entity."""
    return domain.Category(
        id=record["id"],
        name=record["name"],
        category_type=domain.CategoryType(record.get("type", domain.CategoryType.EXPENSE.value)),
    )


def budget_to_record(budget: domain.Budget) -> dict[str, Any]:
    """Convert domain Budget entity to a stored record."""
    return {
        "id": budget.id,
        "name": budget.name,
        "category": budget.category_id,
        "amount": str(budget.amount),
        "spent": str(budget.spent),
        "startDate": _iso(budget.start_date),
        "endDate": _iso(budget.end_date),
        "budgetType": budget.budget_type.value,
        "isRecurring": budget.is_recurring,
        "parentBudgetId": budget.parent_budget_id,
        "transactionIds": list(budget.transaction_ids),
    }


def budget_to_domain(record: dict[str, Any]) -> domain.Budget:
    """Convert stored record to domain Budget entity.

    The category is kept as stored; name references from older blobs are
    translated to ids by the entity store after all collections are loaded.
    """
    return domain.Budget(
        id=record["id"],
        name=record.get("name") or f"{record.get('category', '')} Budget",
        category_id=record.get("category") or domain.ALL_CATEGORIES,
        amount=_money(record.get("amount")),
        spent=_money(record.get("spent")),
        start_date=_date(record.get("startDate")),
        end_date=_date(record.get("endDate")),
        budget_type=domain.BudgetType(record.get("budgetType") or domain.BudgetType.ADDED_ONLY.value),
        is_recurring=bool(record.get("isRecurring", False)),
        parent_budget_id=record.get("parentBudgetId"),
        transaction_ids=tuple(record.get("transactionIds") or ()),
    )


def sub_item_to_record(item: domain.SubItem) -> dict[str, Any]:
    """Convert domain SubItem to a stored record."""
    return {
        "id": item.id,
        "name": item.name,
        "amount": str(item.amount),
        "status": item.status.value,
    }


def sub_item_to_domain(record: dict[str, Any]) -> domain.SubItem:
    """Convert stored record to domain SubItem."""
    return domain.SubItem(
        id=record["id"],
        name=record.get("name", ""),
        amount=_money(record.get("amount")),
        status=domain.SubItemStatus(record.get("status") or domain.SubItemStatus.PAID.value),
    )


def transaction_to_record(txn: domain.Transaction) -> dict[str, Any]:
    """Convert domain Transaction entity to a stored record."""
    record: dict[str, Any] = {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "accountId": txn.account_id,
        "type": txn.transaction_type.value,
        "categoryId": txn.category_id,
        "description": txn.description,
        "amount": str(txn.amount),
        "budgetId": txn.budget_id,
        "isRecurring": txn.is_recurring,
        "recurrenceFrequency": txn.recurrence_frequency.value if txn.recurrence_frequency else None,
        "recurrenceEndDate": _iso(txn.recurrence_end_date),
        "createdAt": txn.created_at.isoformat(),
        "updatedAt": txn.updated_at.isoformat(),
    }
    if txn.sub_items:
        record["subItems"] = [sub_item_to_record(item) for item in txn.sub_items]
    return record


def transaction_to_domain(record: dict[str, Any]) -> domain.Transaction:
    """Convert stored record to domain Transaction entity."""
    frequency = record.get("recurrenceFrequency")
    return domain.Transaction(
        id=record["id"],
        date=_date(record["date"]),
        account_id=record["accountId"],
        transaction_type=domain.TransactionType(record["type"]),
        category_id=record["categoryId"],
        amount=_money(record["amount"]),
        created_at=datetime.fromisoformat(record["createdAt"]),
        updated_at=datetime.fromisoformat(record["updatedAt"]),
        description=record.get("description"),
        budget_id=record.get("budgetId"),
        is_recurring=bool(record.get("isRecurring", False)),
        recurrence_frequency=domain.RecurrenceFrequency(frequency) if frequency else None,
        recurrence_end_date=_date(record.get("recurrenceEndDate")),
        sub_items=tuple(sub_item_to_domain(item) for item in record.get("subItems") or ()),
    )


RECORD_MAPPERS: dict[str, tuple[Callable[[Any], dict[str, Any]], Callable[[dict[str, Any]], Any]]] = {
    ACCOUNTS: (account_to_record, account_to_domain),
    CATEGORIES: (category_to_record, category_to_domain),
    BUDGETS: (budget_to_record, budget_to_domain),
    TRANSACTIONS: (transaction_to_record, transaction_to_domain),
}
