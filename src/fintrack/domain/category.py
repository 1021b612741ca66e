"""Category domain service."""

from dataclasses import replace
from typing import Optional

import structlog

from fintrack.domain.budget_matcher import resolve_category_reference
from fintrack.domain.entities import Category, CategoryType
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import (
    DependencyError,
    DuplicateNameError,
    NotFoundError,
    ValidationError,
    category_not_found,
    delete_blocked,
    duplicate_category_name,
)
from fintrack.utils.clock import IdGenerator

logger = structlog.get_logger(__name__)

DEFAULT_CATEGORIES = (
    ("Food & Dining", CategoryType.EXPENSE),
    ("Rent & Housing", CategoryType.EXPENSE),
    ("Transportation", CategoryType.EXPENSE),
    ("Entertainment", CategoryType.EXPENSE),
    ("Shopping", CategoryType.EXPENSE),
    ("Healthcare", CategoryType.EXPENSE),
    ("Utilities", CategoryType.EXPENSE),
    ("Education", CategoryType.EXPENSE),
    ("Travel", CategoryType.EXPENSE),
    ("Other", CategoryType.EXPENSE),
    ("Salary", CategoryType.INCOME),
)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, store: EntityStore, ids: IdGenerator):
        """Initialize category service.

        Args:
            store: Entity store owning all collections
            ids: Identifier generator for new categories
        """
        self.store = store
        self.ids = ids

    def create_category(self, name: str, category_type: CategoryType = CategoryType.EXPENSE) -> Category:
        """Create a category.

        Args:
            name: Category name, unique within its type
            category_type: Income or Expense

        Returns:
            Created category

        Raises:
            ValidationError: If the name is empty
            DuplicateNameError: If the name is taken within the type
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required", field="name")
        try:
            category_type = CategoryType(category_type)
        except ValueError:
            raise ValidationError(f"Unknown category type: {category_type}", field="type")
        self._check_unique(name, category_type)

        category = Category(id=self.ids.new_id(), name=name, category_type=category_type)
        self.store.put_category(category)
        logger.info("category_created", category_id=category.id, name=name, type=category_type.value)
        return category

    def seed_defaults(self) -> list[Category]:
        """Create the default categories that don't exist yet."""
        created = []
        with self.store.unit_of_work():
            for name, category_type in DEFAULT_CATEGORIES:
                if self.find_by_name(name, category_type) is None:
                    created.append(self.create_category(name, category_type))
        return created

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        return self.store.get_category(category_id)

    def find_by_name(self, name: str, category_type: Optional[CategoryType] = None) -> Optional[Category]:
        """Get category by name, optionally within one type."""
        for category in self.store.list_categories():
            if category.name == name and (category_type is None or category.category_type == category_type):
                return category
        return None

    def resolve(self, reference: str) -> Category:
        """Resolve a category id or name to the category.

        Raises:
            NotFoundError: If nothing matches
        """
        category_id = resolve_category_reference(reference, self.store.list_categories())
        category = self.store.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(reference), field="category_id")
        return category

    def list_categories(self, category_type: Optional[CategoryType] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        return [
            category
            for category in self.store.list_categories()
            if category_type is None or category.category_type == category_type
        ]

    def rename_category(self, category_id: str, name: str) -> Category:
        """Rename a category.

        Raises:
            NotFoundError: If the category doesn't exist
            DuplicateNameError: If the name is taken within the type
        """
        category = self.store.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required", field="name")
        self._check_unique(name, category.category_type, exclude_id=category_id)

        category = replace(category, name=name)
        self.store.put_category(category)
        return category

    def delete_category(self, category_id: str) -> Category:
        """Delete a category.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If transactions or budgets still reference it
        """
        category = self.store.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))

        transaction_count = sum(1 for t in self.store.list_transactions() if t.category_id == category_id)
        budget_count = sum(1 for b in self.store.list_budgets() if b.category_id == category_id)
        if transaction_count > 0 or budget_count > 0:
            raise DependencyError(delete_blocked("category", category.name, transaction_count, budget_count))

        self.store.remove_category(category_id)
        logger.info("category_deleted", category_id=category_id)
        return category

    def _check_unique(self, name: str, category_type: CategoryType, exclude_id: Optional[str] = None) -> None:
        for category in self.store.list_categories():
            if (
                category.id != exclude_id
                and category.category_type == category_type
                and category.name.lower() == name.lower()
            ):
                raise DuplicateNameError(duplicate_category_name(name, category_type.value), field="name")
