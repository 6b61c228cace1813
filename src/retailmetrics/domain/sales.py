"""Checkout domain service."""

import logging
from collections import defaultdict
from datetime import date, datetime, tzinfo as TZInfo
from decimal import Decimal
from typing import Optional, Sequence

from dateutil import tz

from retailmetrics.database.base import Database
from retailmetrics.domain.entities import (
    CartLine,
    HUNDRED,
    RecordId,
    Sale,
    SaleLine,
    ZERO,
)
from retailmetrics.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    insufficient_stock,
    product_not_found,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def line_revenue(line: SaleLine) -> Decimal:
    """Revenue of a priced line after its percentage discount."""
    return line.price * (1 - line.discount / HUNDRED) * line.quantity


class SaleService:
    """Service recording checkouts and listing past sales."""

    def __init__(self, db: Database, tzinfo: Optional[TZInfo] = None):
        """Initialize sale service.

        Args:
            db: Database instance
            tzinfo: Timezone that defines calendar days for listing
        """
        self.db = db
        self.tzinfo = tzinfo

    def record_sale(
        self,
        lines: Sequence[CartLine],
        payment_method: str = "cash",
        tax_rate: Decimal = ZERO,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Record a checkout.

        Each line is priced at the product's current selling price, which is
        stored on the sale item so later price changes don't rewrite history.
        Tax is ``tax_rate`` percent of the discounted subtotal, rounded to
        cents. The sale, its items and the stock decrements are written in a
        single transaction.

        Args:
            lines: Products, quantities and discounts in the cart
            payment_method: How the customer paid
            tax_rate: Tax percentage applied to the subtotal
            created_at: Time of sale (defaults to now)

        Returns:
            Sale ID

        Raises:
            ValidationError: If the cart or a line is invalid
            NotFoundError: If a product doesn't exist
            ConflictError: If a product doesn't have enough stock
        """
        if not lines:
            raise ValidationError("A sale needs at least one item")
        if not payment_method or not payment_method.strip():
            raise ValidationError("Payment method is required")
        if tax_rate < 0:
            raise ValidationError("Tax rate cannot be negative")

        requested: dict[RecordId, int] = defaultdict(int)
        for line in lines:
            if line.quantity < 1:
                raise ValidationError("Quantity must be at least 1")
            if not ZERO <= line.discount <= HUNDRED:
                raise ValidationError("Discount must be between 0 and 100 percent")
            requested[line.product_id] += line.quantity

        products = {}
        for product_id, quantity in requested.items():
            product = self.db.get_product(product_id)
            if product is None:
                raise NotFoundError(product_not_found(product_id))
            if product.stock < quantity:
                raise ConflictError(insufficient_stock(product.name, product.stock, quantity))
            products[product_id] = product

        priced = [
            SaleLine(
                product_id=products[line.product_id].id,
                quantity=line.quantity,
                price=products[line.product_id].price,
                discount=line.discount,
            )
            for line in lines
        ]
        subtotal = sum((line_revenue(line) for line in priced), ZERO)
        tax = (subtotal * tax_rate / HUNDRED).quantize(CENT)

        sale_id = self.db.create_sale(
            created_at=created_at or datetime.now(tz.UTC),
            total=(subtotal + tax).quantize(CENT),
            tax=tax,
            payment_method=payment_method.strip(),
            lines=priced,
        )
        logger.debug("Recorded sale %s with %d lines", sale_id, len(priced))
        return sale_id

    def list_sales(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Sale]:
        return self.db.list_sales(start_date, end_date, tzinfo=self.tzinfo)
