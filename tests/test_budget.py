"""Tests for BudgetService."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from fintrack.domain.entities import ALL_CATEGORIES, BudgetDraft, BudgetType, TransactionType
from fintrack.domain.errors import NotFoundError, ValidationError


def _draft(**overrides) -> BudgetDraft:
    fields = dict(name="Groceries", category="Food", amount=Decimal("100"))
    fields.update(overrides)
    return BudgetDraft(**fields)


class TestCreateBudget:
    """Budget creation."""

    def test_monthly_defaults_to_current_month(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft())
        assert (budget.start_date, budget.end_date) == (date(2024, 3, 1), date(2024, 3, 31))
        assert budget.category_id == sample_categories["Food"].id
        assert budget.spent == Decimal("0")
        assert budget.budget_type == BudgetType.ADDED_ONLY

    def test_weekly_from_start_date(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft(timeframe="weekly", start_date=date(2024, 3, 4)))
        assert (budget.start_date, budget.end_date) == (date(2024, 3, 4), date(2024, 3, 11))

    def test_yearly(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft(timeframe="yearly"))
        assert (budget.start_date, budget.end_date) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_custom_window(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(
            _draft(timeframe="custom", start_date=date(2024, 3, 5), end_date=date(2024, 4, 5))
        )
        assert (budget.start_date, budget.end_date) == (date(2024, 3, 5), date(2024, 4, 5))

    def test_custom_end_before_start(self, budget_service, sample_categories):
        with pytest.raises(ValidationError) as exc_info:
            budget_service.create_budget(
                _draft(timeframe="custom", start_date=date(2024, 3, 5), end_date=date(2024, 3, 1))
            )
        assert exc_info.value.field == "end_date"

    def test_unknown_timeframe(self, budget_service, sample_categories):
        with pytest.raises(ValidationError):
            budget_service.create_budget(_draft(timeframe="fortnightly"))

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10"), None])
    def test_amount_must_be_positive(self, budget_service, sample_categories, amount):
        with pytest.raises(ValidationError):
            budget_service.create_budget(_draft(amount=amount))

    def test_name_required(self, budget_service, sample_categories):
        with pytest.raises(ValidationError):
            budget_service.create_budget(_draft(name="  "))

    def test_unknown_category(self, budget_service, sample_categories):
        with pytest.raises(NotFoundError):
            budget_service.create_budget(_draft(category="Travel"))

    def test_all_categories(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft(category=ALL_CATEGORIES))
        assert budget.category_id == ALL_CATEGORIES

    def test_recurring_creates_monthly_siblings(self, budget_service, sample_categories):
        budgets = budget_service.create_budget(
            _draft(name="Rent", is_recurring=True, number_of_months=3, start_date=date(2024, 1, 1))
        )
        assert [b.name for b in budgets] == ["Rent - January 2024", "Rent - February 2024", "Rent - March 2024"]
        assert len({b.parent_budget_id for b in budgets}) == 1
        assert budget_service.list_budgets(parent_budget_id=budgets[0].parent_budget_id) == budgets

    def test_all_transactions_picks_up_history(self, budget_service, transaction_service, make_draft):
        transaction_service.create_transaction(make_draft(amount=Decimal("30")))
        transaction_service.create_transaction(make_draft(amount=Decimal("12.50")))
        transaction_service.create_transaction(make_draft(amount=Decimal("99"), date=date(2024, 2, 10)))

        (budget,) = budget_service.create_budget(_draft(budget_type=BudgetType.ALL_TRANSACTIONS))
        assert budget.spent == Decimal("42.50")


class TestUpdateBudget:
    """Budget updates."""

    def test_rename_and_raise_amount(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft())
        updated = budget_service.update_budget(budget.id, _draft(name="Food", amount=Decimal("250")))
        assert updated.name == "Food"
        assert updated.amount == Decimal("250.00")
        assert budget_service.get_budget(budget.id) == updated

    def test_amount_below_spent_rejected(self, budget_service, transaction_service, make_draft):
        (budget,) = budget_service.create_budget(_draft())
        transaction_service.create_transaction(make_draft(amount=Decimal("80"), budget_id=budget.id))

        with pytest.raises(ValidationError) as exc_info:
            budget_service.update_budget(budget.id, _draft(amount=Decimal("50")))

        assert exc_info.value.field == "amount"
        assert budget_service.get_budget(budget.id).amount == Decimal("100.00")

    def test_narrowing_window_detaches_transactions(self, budget_service, transaction_service, make_draft):
        (budget,) = budget_service.create_budget(_draft())
        early = transaction_service.create_transaction(make_draft(date=date(2024, 3, 2), budget_id=budget.id))
        late = transaction_service.create_transaction(make_draft(date=date(2024, 3, 20), budget_id=budget.id))

        updated = budget_service.update_budget(
            budget.id, _draft(timeframe="custom", start_date=date(2024, 3, 15), end_date=date(2024, 3, 31))
        )

        assert updated.transaction_ids == (late.id,)
        assert updated.spent == Decimal("20.00")
        assert transaction_service.get_transaction(early.id).budget_id is None
        assert transaction_service.get_transaction(late.id).budget_id == budget.id
        assert budget_service.ledger.drift() == {}

    def test_switch_to_all_transactions(self, budget_service, transaction_service, make_draft):
        (budget,) = budget_service.create_budget(_draft())
        transaction_service.create_transaction(make_draft(amount=Decimal("30")))

        updated = budget_service.update_budget(budget.id, _draft(budget_type=BudgetType.ALL_TRANSACTIONS))
        assert updated.spent == Decimal("30.00")

    def test_unknown_budget(self, budget_service, sample_categories):
        with pytest.raises(NotFoundError):
            budget_service.update_budget("missing", _draft())


class TestDeleteBudget:
    """Budget deletion."""

    def test_delete_clears_transaction_references(self, budget_service, transaction_service, make_draft):
        (budget,) = budget_service.create_budget(_draft())
        txn = transaction_service.create_transaction(make_draft(budget_id=budget.id))

        deleted = budget_service.delete_budget(budget.id)

        assert [b.id for b in deleted] == [budget.id]
        assert budget_service.get_budget(budget.id) is None
        assert transaction_service.get_transaction(txn.id).budget_id is None

    def test_delete_many(self, budget_service, sample_categories):
        budgets = budget_service.create_budget(
            _draft(is_recurring=True, number_of_months=3, start_date=date(2024, 1, 1))
        )
        budget_service.delete_budget([b.id for b in budgets[:2]])
        assert budget_service.list_budgets() == [budgets[2]]

    def test_unknown_id_deletes_nothing(self, budget_service, sample_categories):
        (budget,) = budget_service.create_budget(_draft())
        with pytest.raises(NotFoundError):
            budget_service.delete_budget([budget.id, "missing"])
        assert budget_service.get_budget(budget.id) is not None


class TestRecompute:
    """Spent repair."""

    def test_recompute_repairs_drift(self, budget_service, transaction_service, make_draft, store):
        (budget,) = budget_service.create_budget(_draft())
        transaction_service.create_transaction(make_draft(amount=Decimal("20"), budget_id=budget.id))
        store.put_budget(replace(store.get_budget(budget.id), spent=Decimal("75")))

        repaired = budget_service.recompute_budget_spent(budget.id)

        assert repaired.spent == Decimal("20.00")
        assert store.get_budget(budget.id).spent == Decimal("20.00")

    def test_recompute_all(self, budget_service, store, sample_categories):
        first, second = budget_service.create_budget(
            _draft(is_recurring=True, number_of_months=2, start_date=date(2024, 3, 1))
        )
        store.put_budget(replace(first, spent=Decimal("1")))
        store.put_budget(replace(second, spent=Decimal("2")))

        assert [b.spent for b in budget_service.recompute_all()] == [Decimal("0"), Decimal("0")]

    def test_recompute_unknown(self, budget_service):
        with pytest.raises(NotFoundError):
            budget_service.recompute_budget_spent("missing")


class TestFindCandidates:
    """Candidate lookup through the service."""

    def test_by_category_name(self, budget_service, transaction_service, make_draft):
        (roomy,) = budget_service.create_budget(_draft(name="Roomy"))
        (full,) = budget_service.create_budget(_draft(name="Full", amount=Decimal("20")))
        transaction_service.create_transaction(make_draft(amount=Decimal("20"), budget_id=full.id))

        candidates = budget_service.find_candidates(date(2024, 3, 10), "Food")
        assert [b.id for b in candidates] == [roomy.id]

    def test_income_type_irrelevant(self, budget_service, transaction_service, make_draft):
        (budget,) = budget_service.create_budget(_draft())
        transaction_service.create_transaction(make_draft(transaction_type=TransactionType.INCOME))
        assert budget_service.find_candidates(date(2024, 3, 10), "Food") == [budget]

    def test_unknown_category(self, budget_service, sample_categories):
        with pytest.raises(NotFoundError):
            budget_service.find_candidates(date(2024, 3, 10), "Travel")
