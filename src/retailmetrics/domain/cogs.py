"""Cost of goods sold aggregation."""

import logging
from collections import defaultdict
from datetime import date, tzinfo as TZInfo
from decimal import Decimal
from typing import Any, Optional, Sequence

from retailmetrics.database.base import DataSource
from retailmetrics.domain.calculations import local_date, percent_of
from retailmetrics.domain.entities import (
    Category,
    DateRange,
    RecordId,
    Sale,
    SaleItem,
    ZERO,
)
from retailmetrics.domain.reports import COGSReport, DailyCOGS, ProductCOGS

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_PRODUCT = "Unknown Product"


def category_name_for_item(item: SaleItem, category_names: dict[RecordId, str]) -> str:
    """Resolve the category bucket of a sale item."""
    if item.product is None or item.product.category_id is None:
        return UNCATEGORIZED
    return category_names.get(item.product.category_id, UNKNOWN_CATEGORY)


def sales_in_range(
    sales: Sequence[Sale], date_range: DateRange, tzinfo: Optional[TZInfo] = None
) -> list[tuple[date, Sale]]:
    """Pair each sale with its local calendar day, dropping sales outside the range."""
    dated = []
    for sale in sales:
        day = local_date(sale.created_at, tzinfo)
        if date_range.contains(day):
            dated.append((day, sale))
    return dated


def compute_cogs(
    sales: Sequence[Sale],
    date_range: DateRange,
    categories: Sequence[Category] = (),
    tzinfo: Optional[TZInfo] = None,
) -> COGSReport:
    """Aggregate cost, revenue and profit of the items sold in a date range.

    Every item is visited once and added to the product, category and day
    buckets together, so profit equals revenue minus cost in each bucket.

    Args:
        sales: Sales with their items; sales outside the range are ignored
        date_range: Calendar days to report on
        categories: Known categories used to name category buckets
        tzinfo: Timezone that defines calendar days

    Returns:
        COGSReport for the range
    """
    category_names = {c.id: c.name for c in categories}

    products: dict[Optional[RecordId], dict[str, Any]] = {}
    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_day: dict[date, dict[str, Decimal]] = {}

    total_cogs = ZERO
    total_revenue = ZERO
    items_sold = 0

    dated_sales = sales_in_range(sales, date_range, tzinfo)
    for day, sale in dated_sales:
        day_bucket = by_day.setdefault(day, {"cogs": ZERO, "revenue": ZERO})

        for item in sale.items:
            cost = item.cost
            revenue = item.revenue

            total_cogs += cost
            total_revenue += revenue
            items_sold += item.quantity

            day_bucket["cogs"] += cost
            day_bucket["revenue"] += revenue

            by_category[category_name_for_item(item, category_names)] += cost

            key = item.product.id if item.product is not None else item.product_id
            name = item.product.name if item.product is not None else UNKNOWN_PRODUCT
            bucket = products.setdefault(
                key, {"name": name, "quantity": 0, "cost": ZERO, "revenue": ZERO}
            )
            bucket["quantity"] += item.quantity
            bucket["cost"] += cost
            bucket["revenue"] += revenue

    cogs_by_product = {}
    for key, bucket in products.items():
        profit = bucket["revenue"] - bucket["cost"]
        cogs_by_product[key] = ProductCOGS(
            name=bucket["name"],
            quantity=bucket["quantity"],
            cost=bucket["cost"],
            revenue=bucket["revenue"],
            profit=profit,
            margin=percent_of(profit, bucket["revenue"]),
        )

    daily_data = tuple(
        DailyCOGS(
            date=day,
            cogs=bucket["cogs"],
            revenue=bucket["revenue"],
            profit=bucket["revenue"] - bucket["cogs"],
        )
        for day, bucket in sorted(by_day.items())
    )

    gross_profit = total_revenue - total_cogs
    return COGSReport(
        date_range=date_range,
        total_cogs=total_cogs,
        total_revenue=total_revenue,
        gross_profit=gross_profit,
        gross_margin=percent_of(gross_profit, total_revenue),
        items_sold=items_sold,
        sales_count=len(dated_sales),
        cogs_by_product=cogs_by_product,
        cogs_by_category=dict(by_category),
        daily_data=daily_data,
    )


class COGSService:
    """Service fetching sales and computing COGS reports."""

    def __init__(self, db: DataSource, tzinfo: Optional[TZInfo] = None):
        """Initialize COGS service.

        Args:
            db: Data source instance
            tzinfo: Timezone that defines calendar days
        """
        self.db = db
        self.tzinfo = tzinfo

    def get_report(self, date_range: DateRange) -> COGSReport:
        """Fetch the sales of a date range and compute its COGS report."""
        sales = self.db.list_sales(date_range.start, date_range.end, tzinfo=self.tzinfo)
        categories = self.db.list_categories()
        logger.debug("Computing COGS over %d sales", len(sales))
        return compute_cogs(sales, date_range, categories, tzinfo=self.tzinfo)
