"""Abstract data source and database interfaces."""

from abc import ABC, abstractmethod
from datetime import date, datetime, tzinfo as TZInfo
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from retailmetrics.domain.entities import (
    Category,
    Expense,
    InitialInvestment,
    Product,
    ProductStock,
    RecordId,
    Sale,
    SaleLine,
    Settings,
)


class DataSource(ABC):
    """Read-only query surface consumed by the metrics aggregators."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the data source."""
        pass

    @abstractmethod
    def list_sales(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tzinfo: Optional[TZInfo] = None,
    ) -> list[Sale]:
        """List sales with their items and product references.

        Args:
            start_date: Optional first calendar day (inclusive)
            end_date: Optional last calendar day (inclusive)
            tzinfo: Timezone the calendar days are expressed in
        """
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    @abstractmethod
    def list_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Expense]:
        """List operating expenses by payment date (inclusive bounds)."""
        pass

    @abstractmethod
    def list_investments(self) -> list[InitialInvestment]:
        """List all initial investments ordered by investment date."""
        pass

    @abstractmethod
    def list_products(self) -> list[Product]:
        """List all products ordered by name."""
        pass

    @abstractmethod
    def get_product(self, product_id: RecordId) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def list_products_with_sales(self) -> list[ProductStock]:
        """List all products flagged with whether they were ever sold."""
        pass

    @abstractmethod
    def get_settings(self) -> Settings:
        """Get the global settings, falling back to defaults."""
        pass


class Database(DataSource):
    """Writable database used by the management and checkout services."""

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    # Product operations
    @abstractmethod
    def create_product(
        self,
        name: str,
        price: Decimal,
        purchase_price: Optional[Decimal] = None,
        stock: int = 0,
        min_stock: int = 0,
        category_id: Optional[int] = None,
        barcode: Optional[str] = None,
        expiry_date: Optional[date] = None,
    ) -> int:
        """Create a product. Returns product ID."""
        pass

    @abstractmethod
    def update_product_stock(self, product_id: RecordId, stock: int) -> None:
        """Set the stock level of a product."""
        pass

    @abstractmethod
    def delete_product(self, product_id: RecordId) -> None:
        """Delete a product. Sale items keep their dangling product reference."""
        pass

    # Sale operations
    @abstractmethod
    def create_sale(
        self,
        created_at: datetime,
        total: Decimal,
        tax: Decimal,
        payment_method: str,
        lines: Sequence[SaleLine],
    ) -> int:
        """Persist a sale with its items and decrement product stock.

        Everything happens in one transaction. Returns sale ID.
        """
        pass

    # Expense and investment operations
    @abstractmethod
    def create_expense(
        self,
        amount: Decimal,
        description: str,
        payment_date: date,
        category_id: Optional[int] = None,
    ) -> int:
        """Create an operating expense. Returns expense ID."""
        pass

    @abstractmethod
    def create_investment(
        self,
        amount: Decimal,
        description: Optional[str] = None,
        investment_date: Optional[date] = None,
    ) -> int:
        """Create an initial investment. Returns investment ID."""
        pass

    # Settings operations
    @abstractmethod
    def update_settings(self, currency: str) -> None:
        """Store the global display currency."""
        pass
