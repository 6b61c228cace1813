"""Product and inventory domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from retailmetrics.database.base import Database
from retailmetrics.domain.entities import Product, RecordId
from retailmetrics.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    product_not_found,
)


class ProductService:
    """Service for managing products and their stock levels."""

    def __init__(self, db: Database):
        """Initialize product service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_product(
        self,
        name: str,
        price: Decimal,
        purchase_price: Optional[Decimal] = None,
        stock: int = 0,
        min_stock: int = 0,
        category_name: Optional[str] = None,
        barcode: Optional[str] = None,
        expiry_date: Optional[date] = None,
    ) -> int:
        """Create a product.

        Args:
            name: Product name
            price: Selling price per unit
            purchase_price: Cost per unit, used for COGS; unknown when None
            stock: Units on hand
            min_stock: Reorder threshold
            category_name: Optional category name
            barcode: Optional barcode
            expiry_date: Optional expiry date of the units on hand

        Returns:
            Product ID

        Raises:
            ValidationError: If a field is out of range
            NotFoundError: If the category doesn't exist
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Product name is required")
        if price < 0:
            raise ValidationError("Price cannot be negative")
        if purchase_price is not None and purchase_price < 0:
            raise ValidationError("Purchase price cannot be negative")
        if stock < 0 or min_stock < 0:
            raise ValidationError("Stock levels cannot be negative")

        category_id = None
        if category_name is not None:
            category = self.db.get_category_by_name(category_name)
            if category is None:
                raise NotFoundError(category_not_found(category_name))
            category_id = category.id

        return self.db.create_product(
            name=name,
            price=price,
            purchase_price=purchase_price,
            stock=stock,
            min_stock=min_stock,
            category_id=category_id,
            barcode=barcode,
            expiry_date=expiry_date,
        )

    def get_product(self, product_id: RecordId) -> Product:
        """Get product by ID.

        Raises:
            NotFoundError: If the product doesn't exist
        """
        product = self.db.get_product(product_id)
        if product is None:
            raise NotFoundError(product_not_found(product_id))
        return product

    def list_products(self) -> list[Product]:
        return self.db.list_products()

    def restock(self, product_id: RecordId, quantity: int) -> int:
        """Add received units to a product's stock.

        Returns:
            New stock level
        """
        if quantity < 1:
            raise ValidationError("Restock quantity must be at least 1")
        product = self.get_product(product_id)
        new_stock = product.stock + quantity
        self.db.update_product_stock(product.id, new_stock)
        return new_stock

    def delete_product(self, product_id: RecordId) -> None:
        self.get_product(product_id)
        self.db.delete_product(product_id)
