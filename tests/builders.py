"""Builders for in-memory domain rows used across tests."""

from datetime import datetime, date
from decimal import Decimal

from dateutil import tz

from retailmetrics.domain.entities import (
    Category,
    Expense,
    InitialInvestment,
    Product,
    ProductRef,
    ProductStock,
    Sale,
    SaleItem,
)


def product_ref(product_id=1, name="Widget", price="10.00", purchase_price="5.00", category_id=None):
    return ProductRef(
        id=product_id,
        name=name,
        price=Decimal(price),
        purchase_price=None if purchase_price is None else Decimal(purchase_price),
        category_id=category_id,
    )


def sale_item(product=None, quantity=1, price="10.00", discount="0", product_id=None, item_id=1):
    if product_id is None and product is not None:
        product_id = product.id
    return SaleItem(
        id=item_id,
        sale_id=1,
        product_id=product_id,
        quantity=quantity,
        price=Decimal(price),
        discount=Decimal(discount),
        product=product,
    )


def sale(created_at, *items, sale_id=1, payment_method="cash"):
    total = sum((item.revenue for item in items), Decimal("0"))
    if isinstance(created_at, date) and not isinstance(created_at, datetime):
        created_at = datetime(created_at.year, created_at.month, created_at.day, 12, 0, tzinfo=tz.UTC)
    return Sale(
        id=sale_id,
        created_at=created_at,
        total=total,
        tax=Decimal("0"),
        payment_method=payment_method,
        items=tuple(items),
    )


def expense(payment_date, amount, category_id=None, expense_id=1, description="Rent"):
    return Expense(
        id=expense_id,
        amount=Decimal(amount),
        description=description,
        category_id=category_id,
        payment_date=payment_date,
    )


def investment(amount, investment_date=None, description=None, investment_id=1):
    return InitialInvestment(
        id=investment_id,
        amount=Decimal(amount),
        description=description,
        investment_date=investment_date,
    )


def category(category_id, name):
    return Category(id=category_id, name=name)


def product_stock(
    product_id,
    name,
    price,
    purchase_price,
    stock,
    has_sales,
    category_name="Uncategorized",
    min_stock=0,
    expiry_date=None,
):
    product = Product(
        id=product_id,
        name=name,
        price=Decimal(price),
        purchase_price=None if purchase_price is None else Decimal(purchase_price),
        stock=stock,
        min_stock=min_stock,
        category_id=None,
        expiry_date=expiry_date,
    )
    return ProductStock(product=product, category_name=category_name, has_sales=has_sales)
