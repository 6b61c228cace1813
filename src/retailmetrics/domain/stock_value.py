"""Inventory valuation."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from retailmetrics.database.base import DataSource
from retailmetrics.domain.calculations import percent_of
from retailmetrics.domain.entities import ProductStock, ZERO
from retailmetrics.domain.reports import (
    CategoryStockValue,
    ProductStockValue,
    StockSummary,
)

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 30
HIGH_STOCK_FACTOR = 3


@dataclass
class _CategoryTotals:
    product_count: int = 0
    total_value: Decimal = field(default=ZERO)
    total_cost: Decimal = field(default=ZERO)
    active_product_count: int = 0
    active_total_value: Decimal = field(default=ZERO)
    active_total_cost: Decimal = field(default=ZERO)


def value_product(stock: ProductStock) -> ProductStockValue:
    """Value the units on hand of one product at retail price and at cost."""
    product = stock.product
    retail_value = product.price * product.stock
    cost_value = (product.purchase_price or ZERO) * product.stock
    profit_potential = retail_value - cost_value
    return ProductStockValue(
        product_id=product.id,
        name=product.name,
        category_name=stock.category_name,
        stock=product.stock,
        has_sales=stock.has_sales,
        retail_value=retail_value,
        cost_value=cost_value,
        profit_potential=profit_potential,
        margin_potential=percent_of(profit_potential, retail_value),
    )


def compute_stock_summary(
    products: Sequence[ProductStock], as_of: Optional[date] = None
) -> StockSummary:
    """Summarize inventory value, split by whether products ever sold.

    A product is active when it appears in at least one sale item, whatever
    the date. Each product lands on exactly one side of the split, and the
    category rollups are built from the same per-product decision so their
    active totals add up to the portfolio totals.

    Args:
        products: Every product with its category name and sales flag
        as_of: Day expiry is judged against (defaults to today)

    Returns:
        StockSummary with categories ordered by total value, highest first
    """
    as_of = as_of or date.today()
    expiry_horizon = as_of + timedelta(days=EXPIRY_WARNING_DAYS)

    values = []
    categories: dict[str, _CategoryTotals] = {}

    total_units = 0
    active_value = inactive_value = active_cost = ZERO
    active_count = active_units = 0
    low_stock = high_stock = expired = expiring_soon = ZERO

    for stock in products:
        value = value_product(stock)
        values.append(value)
        product = stock.product
        total_units += product.stock

        totals = categories.setdefault(stock.category_name, _CategoryTotals())
        totals.product_count += 1
        totals.total_value += value.retail_value
        totals.total_cost += value.cost_value

        if stock.has_sales:
            active_value += value.retail_value
            active_cost += value.cost_value
            active_count += 1
            active_units += product.stock
            totals.active_product_count += 1
            totals.active_total_value += value.retail_value
            totals.active_total_cost += value.cost_value
        else:
            inactive_value += value.retail_value

        if 0 < product.stock <= product.min_stock:
            low_stock += value.retail_value
        elif product.min_stock > 0 and product.stock > HIGH_STOCK_FACTOR * product.min_stock:
            high_stock += value.retail_value

        if product.expiry_date is not None and product.stock > 0:
            if product.expiry_date < as_of:
                expired += value.retail_value
            elif product.expiry_date <= expiry_horizon:
                expiring_soon += value.retail_value

    category_values = sorted(
        (
            CategoryStockValue(
                name=name,
                product_count=totals.product_count,
                total_value=totals.total_value,
                total_cost=totals.total_cost,
                has_sold_products=totals.active_product_count > 0,
                active_product_count=totals.active_product_count,
                active_total_value=totals.active_total_value,
                active_total_cost=totals.active_total_cost,
            )
            for name, totals in categories.items()
        ),
        key=lambda c: c.total_value,
        reverse=True,
    )

    total_retail = sum((v.retail_value for v in values), ZERO)
    total_cost = sum((v.cost_value for v in values), ZERO)
    return StockSummary(
        total_retail_value=total_retail,
        total_cost_value=total_cost,
        total_profit_potential=total_retail - total_cost,
        total_products=len(values),
        total_units=total_units,
        active_inventory_value=active_value,
        inactive_inventory_value=inactive_value,
        active_cost_value=active_cost,
        active_profit_potential=active_value - active_cost,
        active_product_count=active_count,
        active_unit_count=active_units,
        low_stock_value=low_stock,
        high_stock_value=high_stock,
        expired_value=expired,
        expiring_soon_value=expiring_soon,
        products=tuple(values),
        categories=tuple(category_values),
    )


class StockValueService:
    """Service fetching products and computing inventory value."""

    def __init__(self, db: DataSource):
        """Initialize stock value service.

        Args:
            db: Data source instance
        """
        self.db = db

    def get_summary(self, as_of: Optional[date] = None) -> StockSummary:
        products = self.db.list_products_with_sales()
        logger.debug("Valuing stock of %d products", len(products))
        return compute_stock_summary(products, as_of)
