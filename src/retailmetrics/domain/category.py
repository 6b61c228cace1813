"""Category domain service."""

from typing import Optional

from retailmetrics.database.base import Database
from retailmetrics.domain.entities import Category
from retailmetrics.domain.errors import ConflictError, ValidationError, duplicate_category


class CategoryService:
    """Service for managing product and expense categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str) -> int:
        """Create a category.

        Args:
            name: Category name, unique across categories

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with this name already exists
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Category name is required")
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(duplicate_category(name))
        return self.db.create_category(name)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.get_category_by_name(name)

    def list_categories(self) -> list[Category]:
        return self.db.list_categories()
