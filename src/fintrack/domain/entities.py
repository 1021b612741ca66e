"""Domain model entities for fintrack.

These are pure data classes representing business concepts, independent of
how collections are persisted. Entities reference each other by id only;
anything holding an id must re-resolve it through the entity store.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

ALL_CATEGORIES = "all"


class AccountType(str, Enum):
    """Kind of account."""

    BANK = "Bank"
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    INVESTMENT = "Investment"
    OTHER = "Other"


class CategoryType(str, Enum):
    """Whether a category collects income or expenses."""

    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionType(str, Enum):
    """Transaction direction."""

    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"


class RecurrenceFrequency(str, Enum):
    """Step between occurrences of a recurring transaction."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class BudgetType(str, Enum):
    """Budget accounting mode.

    ADDED_ONLY counts only transactions explicitly attributed to the budget;
    ALL_TRANSACTIONS counts every expense in the budget's category and window.
    """

    ADDED_ONLY = "added_only"
    ALL_TRANSACTIONS = "all_transactions"


class SubItemStatus(str, Enum):
    """Settlement status of a breakdown item."""

    PAID = "Paid"
    OWED = "Owed"


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    ``balance`` is a running total mutated only by the transaction service.
    """

    id: str
    name: str
    account_type: AccountType
    balance: Decimal
    currency: str = "USD"


@dataclass(frozen=True)
class Category:
    """Category domain entity. Names are unique within a type."""

    id: str
    name: str
    category_type: CategoryType


@dataclass(frozen=True)
class Budget:
    """Budget domain entity.

    ``category_id`` is a category id or ``ALL_CATEGORIES``. A missing
    ``start_date``/``end_date`` leaves the window open on that side.
    ``transaction_ids`` lists transactions explicitly attributed to the budget.
    """

    id: str
    name: str
    category_id: str
    amount: Decimal
    spent: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_type: BudgetType = BudgetType.ADDED_ONLY
    is_recurring: bool = False
    parent_budget_id: Optional[str] = None
    transaction_ids: tuple[str, ...] = ()

    @property
    def remaining(self) -> Decimal:
        """Headroom left before the budget is exceeded."""
        return self.amount - self.spent

    def covers_date(self, day: date) -> bool:
        """Return True if ``day`` falls inside the budget window (inclusive)."""
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True


@dataclass(frozen=True)
class SubItem:
    """One line of a transaction breakdown."""

    id: str
    name: str
    amount: Decimal
    status: SubItemStatus = SubItemStatus.PAID


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always positive; the direction comes from
    ``transaction_type``.
    """

    id: str
    date: date
    account_id: str
    transaction_type: TransactionType
    category_id: str
    amount: Decimal
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    budget_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    recurrence_end_date: Optional[date] = None
    sub_items: tuple[SubItem, ...] = ()

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TransactionType.EXPENSE

    @property
    def balance_delta(self) -> Decimal:
        """Signed effect of this transaction on its account balance."""
        if self.transaction_type == TransactionType.EXPENSE:
            return -self.amount
        if self.transaction_type == TransactionType.INCOME:
            return self.amount
        return Decimal("0")


@dataclass(frozen=True)
class TransactionDraft:
    """Caller-supplied payload for creating or updating a transaction.

    ``sub_items=None`` means no breakdown. An empty tuple means breakdown
    mode was switched on without items, which is only accepted with
    ``confirm_empty_breakdown``. ``auto_budget`` asks the service to attach
    a matching budget, creating one when none can absorb the amount.
    """

    date: date
    account_id: str
    transaction_type: TransactionType
    category_id: str
    amount: Decimal
    description: Optional[str] = None
    budget_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    recurrence_end_date: Optional[date] = None
    sub_items: Optional[tuple[SubItem, ...]] = None
    auto_budget: bool = False
    confirm_empty_breakdown: bool = False


@dataclass(frozen=True)
class BudgetDraft:
    """Caller-supplied payload for creating or updating a budget.

    ``category`` may be a category id, a category name, or ``"all"``.
    ``timeframe`` is one of weekly, monthly, yearly or custom; only custom
    uses ``start_date``/``end_date`` as given.
    """

    name: str
    category: str
    amount: Decimal
    timeframe: str = "monthly"
    budget_type: BudgetType = BudgetType.ADDED_ONLY
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_recurring: bool = False
    number_of_months: int = 1


@dataclass(frozen=True)
class MonthlyTotal:
    """Income and expense totals for one calendar month."""

    month: str
    income: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class CategoryShare:
    """Expense total for one category with its share of all expenses."""

    category_id: Optional[str]
    category_name: str
    total: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class BudgetProgress:
    """Spend progress for one budget."""

    budget_id: str
    name: str
    amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    is_over_budget: bool


@dataclass(frozen=True)
class MonthComparison:
    """Current month figures compared with the previous month."""

    current: MonthlyTotal
    previous: MonthlyTotal
    income_change: Optional[Decimal] = None
    expense_change: Optional[Decimal] = None
    balance_change: Optional[Decimal] = None
