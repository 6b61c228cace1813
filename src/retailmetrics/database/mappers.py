"""Mapper functions to convert stored rows into domain entities.

Two kinds of rows reach the domain: SQLAlchemy models from the local
database, and plain dictionaries exported from the hosted data source. The
hosted rows come with embedded relations whose shape depends on how the
service inferred the join cardinality (a single object, a one-element list,
or nothing). ``unwrap_related`` and ``related_list`` normalize those shapes
here so the aggregators always receive an optional single record.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil import tz

from retailmetrics.domain import entities as domain
from retailmetrics.domain.errors import DataSourceError
from retailmetrics.database.models import (
    Category as ORMCategory,
    Product as ORMProduct,
    Sale as ORMSale,
    SaleItem as ORMSaleItem,
    Expense as ORMExpense,
    InitialInvestment as ORMInitialInvestment,
)


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=tz.UTC)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# SQLAlchemy models

def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(id=orm_category.id, name=orm_category.name)


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        name=orm_product.name,
        price=_as_decimal(orm_product.price),
        purchase_price=(
            None if orm_product.purchase_price is None else _as_decimal(orm_product.purchase_price)
        ),
        stock=orm_product.stock,
        min_stock=orm_product.min_stock,
        category_id=orm_product.category_id,
        barcode=orm_product.barcode,
        expiry_date=orm_product.expiry_date,
        created_at=_as_utc(orm_product.created_at),
    )


def sale_item_to_domain(orm_item: ORMSaleItem) -> domain.SaleItem:
    """Convert SQLAlchemy SaleItem model to domain SaleItem entity."""
    product = None
    if orm_item.product is not None:
        product = product_to_domain(orm_item.product).to_ref()
    return domain.SaleItem(
        id=orm_item.id,
        sale_id=orm_item.sale_id,
        product_id=orm_item.product_id,
        quantity=orm_item.quantity,
        price=_as_decimal(orm_item.price),
        discount=_as_decimal(orm_item.discount or 0),
        product=product,
    )


def sale_to_domain(orm_sale: ORMSale) -> domain.Sale:
    """Convert SQLAlchemy Sale model (with items loaded) to domain Sale entity."""
    return domain.Sale(
        id=orm_sale.id,
        created_at=_as_utc(orm_sale.created_at),
        total=_as_decimal(orm_sale.total),
        tax=_as_decimal(orm_sale.tax or 0),
        payment_method=orm_sale.payment_method,
        items=tuple(sale_item_to_domain(item) for item in orm_sale.items),
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        amount=_as_decimal(orm_expense.amount),
        description=orm_expense.description,
        category_id=orm_expense.category_id,
        payment_date=orm_expense.payment_date,
    )


def investment_to_domain(orm_investment: ORMInitialInvestment) -> domain.InitialInvestment:
    """Convert SQLAlchemy InitialInvestment model to domain entity."""
    return domain.InitialInvestment(
        id=orm_investment.id,
        amount=_as_decimal(orm_investment.amount),
        description=orm_investment.description,
        investment_date=orm_investment.investment_date,
    )


# Hosted-export records

def unwrap_related(value: Any) -> Optional[dict[str, Any]]:
    """Normalize an embedded to-one relation to an optional single record.

    Args:
        value: ``None``, a record dict, or a list holding at most one record

    Returns:
        The related record, or None when the relation is empty

    Raises:
        DataSourceError: If the value is neither a record nor a list of records
    """
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        first = value[0]
        if not isinstance(first, dict):
            raise DataSourceError(f"Unexpected related record: {first!r}")
        return first
    raise DataSourceError(f"Unexpected related record: {value!r}")


def related_list(value: Any) -> list[dict[str, Any]]:
    """Normalize an embedded to-many relation to a list of records."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, (list, tuple)):
        return [record for record in value if record is not None]
    raise DataSourceError(f"Unexpected related records: {value!r}")


def parse_timestamp(value: Any) -> datetime:
    """Parse an exported timestamp, treating values without offset as UTC."""
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = date_parser.isoparse(str(value))
        except (ValueError, TypeError) as e:
            raise DataSourceError(f"Could not parse timestamp '{value}': {e}")
    return _as_utc(moment)


def parse_day(value: Any) -> Optional[date]:
    """Parse an exported date or timestamp into a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, TypeError) as e:
        raise DataSourceError(f"Could not parse date '{value}': {e}")


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return _record_decimal(value)


def _record_decimal(value: Any) -> Decimal:
    try:
        return _as_decimal(0 if value is None else value)
    except (InvalidOperation, ValueError) as e:
        raise DataSourceError(f"Could not parse amount '{value}': {e}")


def category_from_record(record: dict[str, Any]) -> domain.Category:
    return domain.Category(id=record["id"], name=record.get("name") or "Unknown")


def product_ref_from_record(record: dict[str, Any]) -> domain.ProductRef:
    return domain.ProductRef(
        id=record["id"],
        name=record.get("name") or "Unknown Product",
        price=_record_decimal(record.get("price")),
        purchase_price=_optional_decimal(record.get("purchase_price")),
        category_id=record.get("category_id"),
    )


def product_from_record(record: dict[str, Any]) -> domain.Product:
    created_at = record.get("created_at")
    return domain.Product(
        id=record["id"],
        name=record.get("name") or "Unknown Product",
        price=_record_decimal(record.get("price")),
        purchase_price=_optional_decimal(record.get("purchase_price")),
        stock=int(record.get("stock") or 0),
        min_stock=int(record.get("min_stock") or 0),
        category_id=record.get("category_id"),
        barcode=record.get("barcode"),
        expiry_date=parse_day(record.get("expiry_date")),
        created_at=parse_timestamp(created_at) if created_at else None,
    )


def sale_item_from_record(record: dict[str, Any], sale_id: Any = None) -> domain.SaleItem:
    # Hosted joins name the relation after the table
    related = record.get("products", record.get("product"))
    product = unwrap_related(related)
    return domain.SaleItem(
        id=record.get("id"),
        sale_id=record.get("sale_id", sale_id),
        product_id=record.get("product_id"),
        quantity=int(record.get("quantity") or 0),
        price=_record_decimal(record.get("price")),
        discount=_record_decimal(record.get("discount")),
        product=product_ref_from_record(product) if product is not None else None,
    )


def sale_from_record(record: dict[str, Any]) -> domain.Sale:
    items = related_list(record.get("sale_items", record.get("items")))
    return domain.Sale(
        id=record["id"],
        created_at=parse_timestamp(record["created_at"]),
        total=_record_decimal(record.get("total")),
        tax=_record_decimal(record.get("tax")),
        payment_method=record.get("payment_method") or "unknown",
        items=tuple(sale_item_from_record(item, sale_id=record["id"]) for item in items),
    )


def expense_from_record(record: dict[str, Any]) -> domain.Expense:
    payment_date = parse_day(record.get("payment_date"))
    if payment_date is None:
        raise DataSourceError(f"Expense {record.get('id')} has no payment date")
    return domain.Expense(
        id=record["id"],
        amount=_record_decimal(record.get("amount")),
        description=record.get("description") or "",
        category_id=record.get("category_id"),
        payment_date=payment_date,
    )


def investment_from_record(record: dict[str, Any]) -> domain.InitialInvestment:
    return domain.InitialInvestment(
        id=record["id"],
        amount=_record_decimal(record.get("amount")),
        description=record.get("description"),
        investment_date=parse_day(record.get("investment_date")),
    )
