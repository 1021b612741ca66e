"""Tests for CategoryService."""

from decimal import Decimal

import pytest

from fintrack.domain.category import DEFAULT_CATEGORIES
from fintrack.domain.entities import BudgetDraft, CategoryType
from fintrack.domain.errors import DependencyError, DuplicateNameError, NotFoundError, ValidationError


def test_create_category(category_service):
    """Test creating a category."""
    category = category_service.create_category("Travel", CategoryType.EXPENSE)
    assert category.name == "Travel"
    assert category.category_type == CategoryType.EXPENSE
    assert category_service.get_category(category.id) == category


def test_duplicate_name_within_type(category_service):
    category_service.create_category("Gifts", CategoryType.EXPENSE)
    with pytest.raises(DuplicateNameError) as exc_info:
        category_service.create_category("gifts", CategoryType.EXPENSE)
    assert exc_info.value.kind == "DuplicateName"


def test_same_name_in_other_type(category_service):
    category_service.create_category("Gifts", CategoryType.EXPENSE)
    income = category_service.create_category("Gifts", CategoryType.INCOME)
    assert income.category_type == CategoryType.INCOME


def test_name_required(category_service):
    with pytest.raises(ValidationError):
        category_service.create_category("")


def test_list_by_type(category_service, sample_categories):
    income = category_service.list_categories(CategoryType.INCOME)
    assert [c.name for c in income] == ["Salary"]
    assert len(category_service.list_categories()) == 3


def test_resolve_by_name_or_id(category_service, sample_categories):
    food = sample_categories["Food"]
    assert category_service.resolve("Food") == food
    assert category_service.resolve(food.id) == food
    with pytest.raises(NotFoundError):
        category_service.resolve("Nope")


def test_find_by_name(category_service, sample_categories):
    assert category_service.find_by_name("Salary", CategoryType.INCOME) == sample_categories["Salary"]
    assert category_service.find_by_name("Salary", CategoryType.EXPENSE) is None


def test_rename(category_service, sample_categories):
    renamed = category_service.rename_category(sample_categories["Food"].id, "Groceries")
    assert renamed.name == "Groceries"
    assert renamed.id == sample_categories["Food"].id


def test_rename_to_existing_name(category_service, sample_categories):
    with pytest.raises(DuplicateNameError):
        category_service.rename_category(sample_categories["Food"].id, "Shopping")


def test_seed_defaults_is_idempotent(category_service):
    created = category_service.seed_defaults()
    assert len(created) == len(DEFAULT_CATEGORIES)
    assert category_service.seed_defaults() == []
    assert category_service.find_by_name("Salary").category_type == CategoryType.INCOME


def test_delete_unused(category_service, sample_categories):
    category_service.delete_category(sample_categories["Shopping"].id)
    assert category_service.get_category(sample_categories["Shopping"].id) is None


def test_delete_blocked_by_transactions(category_service, transaction_service, make_draft, sample_categories):
    transaction_service.create_transaction(make_draft())
    with pytest.raises(DependencyError, match="1 transaction"):
        category_service.delete_category(sample_categories["Food"].id)


def test_delete_blocked_by_budgets(category_service, budget_service, sample_categories):
    budget_service.create_budget(BudgetDraft(name="Fun", category="Shopping", amount=Decimal("50")))
    with pytest.raises(DependencyError, match="1 budget"):
        category_service.delete_category(sample_categories["Shopping"].id)
