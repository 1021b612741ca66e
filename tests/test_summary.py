"""Tests for summary and analytics."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.domain.entities import BudgetDraft, TransactionType
from fintrack.domain.summary import percent_change, percentage


@pytest.fixture
def history(transaction_service, make_draft, sample_categories):
    """Income and expenses across February and March 2024, plus one transfer."""
    salary = sample_categories["Salary"].id
    shopping = sample_categories["Shopping"].id
    drafts = [
        make_draft(date=date(2024, 2, 1), transaction_type=TransactionType.INCOME, category_id=salary, amount=Decimal("2000")),
        make_draft(date=date(2024, 2, 5), amount=Decimal("100")),
        make_draft(date=date(2024, 2, 20), category_id=shopping, amount=Decimal("300")),
        make_draft(date=date(2024, 3, 1), transaction_type=TransactionType.INCOME, category_id=salary, amount=Decimal("2500")),
        make_draft(date=date(2024, 3, 3), amount=Decimal("150")),
        make_draft(date=date(2024, 3, 9), category_id=shopping, amount=Decimal("50")),
        make_draft(date=date(2024, 3, 12), transaction_type=TransactionType.TRANSFER, amount=Decimal("999")),
    ]
    return [transaction_service.create_transaction(draft) for draft in drafts]


def test_percentage_helpers():
    assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.3")
    assert percentage(Decimal("5"), Decimal("0")) == Decimal("0")
    assert percent_change(Decimal("150"), Decimal("100")) == Decimal("50.0")
    assert percent_change(Decimal("50"), Decimal("0")) is None


def test_monthly_totals_exclude_transfers(summary_service, history):
    totals = summary_service.monthly_totals()

    assert [t.month for t in totals] == ["2024-02", "2024-03"]
    assert totals[0].income == Decimal("2000.00")
    assert totals[0].expenses == Decimal("400.00")
    assert totals[1].income == Decimal("2500.00")
    assert totals[1].expenses == Decimal("200.00")
    assert totals[1].net == Decimal("2300.00")


def test_monthly_totals_respect_date_range(summary_service, history):
    totals = summary_service.monthly_totals(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    assert [t.month for t in totals] == ["2024-03"]


def test_category_breakdown_sorted_by_total(summary_service, history, sample_categories):
    shares = summary_service.category_breakdown()

    assert [s.category_name for s in shares] == ["Shopping", "Food"]
    assert shares[0].total == Decimal("350.00")
    assert shares[0].percentage == Decimal("58.3")
    assert shares[1].total == Decimal("250.00")
    assert shares[1].percentage == Decimal("41.7")


def test_category_breakdown_empty(summary_service):
    assert summary_service.category_breakdown() == []


def test_spending_trend_zero_fills(summary_service, history):
    trend = summary_service.spending_trend(4, today=date(2024, 3, 15))

    assert [t.month for t in trend] == ["2023-12", "2024-01", "2024-02", "2024-03"]
    assert trend[0].income == Decimal("0")
    assert trend[0].expenses == Decimal("0")
    assert trend[3].expenses == Decimal("200.00")


def test_month_over_month(summary_service, history):
    comparison = summary_service.month_over_month(today=date(2024, 3, 15))

    assert comparison.previous.month == "2024-02"
    assert comparison.current.month == "2024-03"
    assert comparison.income_change == Decimal("25.0")
    assert comparison.expense_change == Decimal("-50.0")
    # net 2300 against previous income 2000
    assert comparison.balance_change == Decimal("15.0")


def test_month_over_month_without_history(summary_service):
    comparison = summary_service.month_over_month(today=date(2024, 3, 15))

    assert comparison.income_change is None
    assert comparison.expense_change is None
    assert comparison.balance_change is None


def test_budget_progress(budget_service, summary_service, history):
    budget_service.create_budget(BudgetDraft(name="Food", category="Food", amount=Decimal("100")))
    budget_service.create_budget(
        BudgetDraft(name="Everything", category="all", amount=Decimal("1000"), budget_type="all_transactions")
    )

    progress = {p.name: p for p in summary_service.budget_progress()}

    assert progress["Food"].spent == Decimal("0.00")
    assert progress["Food"].percentage == Decimal("0.0")
    assert not progress["Food"].is_over_budget
    assert progress["Everything"].spent == Decimal("200.00")
    assert progress["Everything"].remaining == Decimal("800.00")
    assert progress["Everything"].percentage == Decimal("20.0")
