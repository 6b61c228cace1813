"""Tests for the SQLAlchemy database implementation."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from dateutil import tz

from retailmetrics.database import Database, DataSource
from retailmetrics.domain.cogs import COGSService
from retailmetrics.domain.entities import DateRange, SaleLine
from retailmetrics.domain.errors import NotFoundError
from retailmetrics.domain.stock_value import StockValueService


def _sale(db, product_id, created_at, quantity=1, price="10.00"):
    return db.create_sale(
        created_at=created_at,
        total=Decimal(price) * quantity,
        tax=Decimal("0"),
        payment_method="cash",
        lines=[SaleLine(product_id=product_id, quantity=quantity, price=Decimal(price))],
    )


def test_database_is_writable_data_source(temp_db):
    assert isinstance(temp_db, Database)
    assert isinstance(temp_db, DataSource)


def test_category_round_trip(temp_db):
    category_id = temp_db.create_category("Snacks")

    assert temp_db.get_category_by_name("Snacks").id == category_id
    assert temp_db.get_category_by_name("Nope") is None
    assert [c.name for c in temp_db.list_categories()] == ["Snacks"]


def test_product_amounts_are_decimal(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.5"), Decimal("1.25"), stock=3)

    product = temp_db.get_product(product_id)

    assert isinstance(product.price, Decimal)
    assert product.price == Decimal("4.50")
    assert product.purchase_price == Decimal("1.25")
    assert product.created_at is not None


def test_create_sale_decrements_stock(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.50"), stock=10)

    sale_id = _sale(temp_db, product_id, datetime(2024, 1, 5, 12, 0, tzinfo=tz.UTC), quantity=4)

    assert temp_db.get_product(product_id).stock == 6
    sales = temp_db.list_sales()
    assert [s.id for s in sales] == [sale_id]
    assert sales[0].items[0].product.name == "Tea"


def test_create_sale_unknown_product_writes_nothing(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.50"), stock=10)

    with pytest.raises(NotFoundError):
        temp_db.create_sale(
            created_at=datetime(2024, 1, 5, 12, 0, tzinfo=tz.UTC),
            total=Decimal("9"),
            tax=Decimal("0"),
            payment_method="cash",
            lines=[
                SaleLine(product_id=product_id, quantity=1, price=Decimal("4.50")),
                SaleLine(product_id=999, quantity=1, price=Decimal("4.50")),
            ],
        )

    assert temp_db.list_sales() == []
    assert temp_db.get_product(product_id).stock == 10


def test_sales_are_stored_in_utc(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.50"), stock=10)
    berlin = tz.gettz("Europe/Berlin")
    _sale(temp_db, product_id, datetime(2024, 1, 1, 0, 30, tzinfo=berlin))

    sale = temp_db.list_sales()[0]

    assert sale.created_at == datetime(2023, 12, 31, 23, 30, tzinfo=tz.UTC)


def test_list_sales_uses_local_day_bounds(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.50"), stock=10)
    _sale(temp_db, product_id, datetime(2024, 1, 31, 23, 30, tzinfo=tz.UTC))
    _sale(temp_db, product_id, datetime(2024, 2, 1, 8, 0, tzinfo=tz.UTC))
    berlin = tz.gettz("Europe/Berlin")

    assert len(temp_db.list_sales(date(2024, 1, 1), date(2024, 1, 31), tzinfo=tz.UTC)) == 1
    assert len(temp_db.list_sales(date(2024, 1, 1), date(2024, 1, 31), tzinfo=berlin)) == 0
    assert len(temp_db.list_sales(date(2024, 2, 1), date(2024, 2, 1), tzinfo=berlin)) == 2
    assert len(temp_db.list_sales(start_date=date(2024, 2, 1), tzinfo=tz.UTC)) == 1


def test_deleted_product_leaves_unknown_sale_item(temp_db):
    product_id = temp_db.create_product("Tea", Decimal("4.50"), Decimal("2.00"), stock=10)
    _sale(temp_db, product_id, datetime(2024, 1, 5, 12, 0, tzinfo=tz.UTC))

    temp_db.delete_product(product_id)
    temp_db.disconnect()

    item = temp_db.list_sales()[0].items[0]
    assert item.product_id == product_id
    assert item.product is None
    assert item.cost == 0


def test_new_product_does_not_inherit_deleted_sales(temp_db):
    old_id = temp_db.create_product("Old", Decimal("10.00"), Decimal("5.00"), stock=5)
    _sale(temp_db, old_id, datetime(2024, 1, 5, 12, 0, tzinfo=tz.UTC), quantity=2)
    temp_db.delete_product(old_id)

    fresh_id = temp_db.create_product("Fresh", Decimal("100.00"), Decimal("90.00"), stock=3)

    assert fresh_id != old_id
    summary = StockValueService(temp_db).get_summary(date(2024, 2, 1))
    assert summary.active_inventory_value == 0
    assert summary.inactive_inventory_value == Decimal("300.00")

    january = DateRange(date(2024, 1, 1), date(2024, 1, 31))
    report = COGSService(temp_db, tzinfo=tz.UTC).get_report(january)
    assert report.total_revenue == Decimal("20.00")
    assert report.total_cogs == 0
    assert report.cogs_by_product[old_id].name == "Unknown Product"
    assert fresh_id not in report.cogs_by_product


def test_delete_missing_product(temp_db):
    with pytest.raises(NotFoundError):
        temp_db.delete_product(42)
    with pytest.raises(NotFoundError):
        temp_db.update_product_stock(42, 1)


def test_products_with_sales(temp_db):
    category_id = temp_db.create_category("Drinks")
    tea = temp_db.create_product("Tea", Decimal("4.50"), stock=10, category_id=category_id)
    temp_db.create_product("Cups", Decimal("1.00"), stock=10)
    _sale(temp_db, tea, datetime(2024, 1, 5, 12, 0, tzinfo=tz.UTC))

    rows = {row.product.name: row for row in temp_db.list_products_with_sales()}

    assert rows["Tea"].has_sales is True
    assert rows["Tea"].category_name == "Drinks"
    assert rows["Cups"].has_sales is False
    assert rows["Cups"].category_name == "Uncategorized"


def test_expenses_filtered_by_payment_date(temp_db):
    temp_db.create_expense(Decimal("10"), "Power", date(2024, 1, 1))
    temp_db.create_expense(Decimal("20"), "Water", date(2024, 1, 31))
    temp_db.create_expense(Decimal("30"), "Rent", date(2024, 2, 1))

    january = temp_db.list_expenses(date(2024, 1, 1), date(2024, 1, 31))

    assert [e.description for e in january] == ["Power", "Water"]
    assert len(temp_db.list_expenses()) == 3


def test_investments(temp_db):
    temp_db.create_investment(Decimal("1000"), "Fit-out", date(2024, 1, 1))
    temp_db.create_investment(Decimal("250"))

    investments = temp_db.list_investments()

    assert sum(i.amount for i in investments) == Decimal("1250")
    assert {i.investment_date for i in investments} == {date(2024, 1, 1), None}


def test_settings_default_and_update(temp_db):
    assert temp_db.get_settings().currency == "USD"

    temp_db.update_settings("EUR")
    temp_db.update_settings("MAD")

    assert temp_db.get_settings().currency == "MAD"
