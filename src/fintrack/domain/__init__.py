"""Domain layer for fintrack application."""

from fintrack.domain.account import AccountService
from fintrack.domain.budget import BudgetService
from fintrack.domain.category import CategoryService
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.summary import SummaryService
from fintrack.domain.transaction import TransactionService

__all__ = [
    "AccountService",
    "BudgetService",
    "CategoryService",
    "EntityStore",
    "SummaryService",
    "TransactionService",
]
