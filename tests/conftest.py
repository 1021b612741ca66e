"""Shared pytest fixtures for fintrack tests."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from fintrack.database.factories import create_memory_store, create_sqlite_store
from fintrack.domain.entities import CategoryType, TransactionDraft, TransactionType
from fintrack.tracker import FinanceTracker
from fintrack.utils.clock import Clock, IdGenerator


class FixedClock(Clock):
    """Clock that always reports the same instant unless advanced."""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now


class SequentialIds(IdGenerator):
    """Predictable ids: id-1, id-2, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.counter = 0

    def new_id(self) -> str:
        self.counter += 1
        return f"{self.prefix}-{self.counter}"


@pytest.fixture
def clock():
    """Fixed clock at 2024-03-15 12:00 UTC."""
    return FixedClock(datetime(2024, 3, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
def ids():
    """Sequential id generator."""
    return SequentialIds()


@pytest.fixture
def memory_store():
    """Empty in-memory blob store."""
    return create_memory_store()


@pytest.fixture
def temp_db_path(tmp_path):
    """Path for a temporary SQLite database file."""
    return str(tmp_path / "fintrack.db")


@pytest.fixture
def sqlite_store(temp_db_path):
    """Temporary SQLite blob store."""
    store = create_sqlite_store(database_path=temp_db_path)
    store.connect()
    yield store
    store.disconnect()


@pytest.fixture
def tracker(memory_store, clock, ids):
    """FinanceTracker over an in-memory store."""
    return FinanceTracker(memory_store, clock=clock, ids=ids)


@pytest.fixture
def store(tracker):
    """The tracker's entity store."""
    return tracker.store


@pytest.fixture
def account_service(tracker):
    return tracker.accounts


@pytest.fixture
def category_service(tracker):
    return tracker.categories


@pytest.fixture
def budget_service(tracker):
    return tracker.budgets


@pytest.fixture
def transaction_service(tracker):
    return tracker.transactions


@pytest.fixture
def summary_service(tracker):
    return tracker.summary


@pytest.fixture
def sample_account(account_service):
    """Checking account opened with $1,000.00."""
    return account_service.create_account(name="Checking", balance=Decimal("1000.00"))


@pytest.fixture
def sample_categories(category_service):
    """A few categories keyed by name."""
    return {
        "Food": category_service.create_category("Food", CategoryType.EXPENSE),
        "Shopping": category_service.create_category("Shopping", CategoryType.EXPENSE),
        "Salary": category_service.create_category("Salary", CategoryType.INCOME),
    }


@pytest.fixture
def make_draft(sample_account, sample_categories):
    """Build a TransactionDraft with sensible defaults: a $20 food expense on 2024-03-10."""

    def _make(**overrides) -> TransactionDraft:
        fields = dict(
            date=date(2024, 3, 10),
            account_id=sample_account.id,
            transaction_type=TransactionType.EXPENSE,
            category_id=sample_categories["Food"].id,
            amount=Decimal("20.00"),
        )
        fields.update(overrides)
        return TransactionDraft(**fields)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
