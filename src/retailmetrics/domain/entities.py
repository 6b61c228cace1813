"""Domain model entities for retailmetrics.

These are pure data classes representing business concepts, independent of
database schema. Both the SQLAlchemy database and the JSON snapshot source
map their rows onto these entities before any aggregation happens, so the
report logic never sees storage-specific shapes.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, Union

from retailmetrics.domain.errors import ValidationError

# SQLite rows use integer keys, hosted exports use UUID strings
RecordId = Union[int, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"Start date {self.start.isoformat()} is after end date {self.end.isoformat()}"
            )

    @property
    def days(self) -> int:
        """Number of calendar days covered, counting both ends."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Category:
    """Product or expense category."""

    id: RecordId
    name: str


@dataclass(frozen=True)
class ProductRef:
    """Snapshot of the product fields a sale item needs for cost lookup."""

    id: RecordId
    name: str
    price: Decimal
    purchase_price: Optional[Decimal]
    category_id: Optional[RecordId]


@dataclass(frozen=True)
class Product:
    """Inventory product."""

    id: RecordId
    name: str
    price: Decimal
    purchase_price: Optional[Decimal]
    stock: int
    min_stock: int
    category_id: Optional[RecordId]
    barcode: Optional[str] = None
    expiry_date: Optional[date] = None
    created_at: Optional[datetime] = None

    def to_ref(self) -> ProductRef:
        return ProductRef(
            id=self.id,
            name=self.name,
            price=self.price,
            purchase_price=self.purchase_price,
            category_id=self.category_id,
        )


@dataclass(frozen=True)
class SaleItem:
    """Line of a sale.

    ``price`` is the unit price charged at checkout and ``discount`` is a
    percentage between 0 and 100.
    """

    id: RecordId
    sale_id: RecordId
    product_id: Optional[RecordId]
    quantity: int
    price: Decimal
    discount: Decimal = ZERO
    product: Optional[ProductRef] = None

    @property
    def revenue(self) -> Decimal:
        return self.price * (1 - self.discount / HUNDRED) * self.quantity

    @property
    def cost(self) -> Decimal:
        if self.product is None or self.product.purchase_price is None:
            return ZERO
        return self.product.purchase_price * self.quantity

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.cost


@dataclass(frozen=True)
class Sale:
    """Completed checkout with its items."""

    id: RecordId
    created_at: datetime
    total: Decimal
    tax: Decimal
    payment_method: str
    items: tuple[SaleItem, ...] = ()


@dataclass(frozen=True)
class Expense:
    """Operating expense, distinct from cost of goods sold."""

    id: RecordId
    amount: Decimal
    description: str
    category_id: Optional[RecordId]
    payment_date: date


@dataclass(frozen=True)
class InitialInvestment:
    """Capital invested in the business."""

    id: RecordId
    amount: Decimal
    description: Optional[str]
    investment_date: Optional[date]


@dataclass(frozen=True)
class Settings:
    """Global application settings."""

    currency: str = "USD"


@dataclass(frozen=True)
class ProductStock:
    """Product enriched with its category name and sales history flag."""

    product: Product
    category_name: str
    has_sales: bool


@dataclass(frozen=True)
class CartLine:
    """Requested line of a checkout before it is priced."""

    product_id: RecordId
    quantity: int
    discount: Decimal = field(default=ZERO)


@dataclass(frozen=True)
class SaleLine:
    """Priced checkout line ready to be persisted as a sale item."""

    product_id: RecordId
    quantity: int
    price: Decimal
    discount: Decimal = field(default=ZERO)
