"""Tests for net profit and operating expense aggregation."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from dateutil import tz

from builders import category, expense, product_ref, sale, sale_item
from retailmetrics.domain.entities import CartLine, DateRange
from retailmetrics.domain.errors import NotFoundError, ValidationError
from retailmetrics.domain.expenses import compute_operating_expenses
from retailmetrics.domain.net_profit import NetProfitService, compute_net_profit

JANUARY = DateRange(date(2024, 1, 1), date(2024, 1, 31))


def _january_sale():
    widget = product_ref(price="10.00", purchase_price="5.00")
    return sale(date(2024, 1, 10), sale_item(widget, quantity=2, price="10.00"))


def test_net_profit_subtracts_operating_expenses():
    report = compute_net_profit(
        [_january_sale()], [expense(date(2024, 1, 11), "5.00")], JANUARY, tzinfo=tz.UTC
    )

    assert report.gross_profit == Decimal("10")
    assert report.total_operating_expenses == Decimal("5.00")
    assert report.net_profit == Decimal("5")
    assert report.net_margin == Decimal("25")
    assert report.units_sold == 2


def test_empty_range_has_zero_margins():
    report = compute_net_profit([], [], JANUARY, tzinfo=tz.UTC)

    assert report.total_revenue == 0
    assert report.gross_margin == 0
    assert report.net_margin == 0
    assert report.daily_data == ()


def test_expenses_without_revenue_give_negative_profit_and_zero_margin():
    report = compute_net_profit([], [expense(date(2024, 1, 3), "40.00")], JANUARY, tzinfo=tz.UTC)

    assert report.net_profit == Decimal("-40.00")
    assert report.net_margin == 0


def test_daily_series_is_union_of_sale_and_expense_days():
    report = compute_net_profit(
        [_january_sale()],
        [expense(date(2024, 1, 11), "5.00"), expense(date(2024, 1, 10), "1.00", expense_id=2)],
        JANUARY,
        tzinfo=tz.UTC,
    )

    days = {d.date: d for d in report.daily_data}
    assert list(days) == [date(2024, 1, 10), date(2024, 1, 11)]
    assert days[date(2024, 1, 10)].net_profit == Decimal("9.00")
    assert days[date(2024, 1, 11)].revenue == 0
    assert days[date(2024, 1, 11)].net_profit == Decimal("-5.00")


def test_daily_net_profit_sums_to_total():
    a = product_ref(product_id=1, purchase_price="2.37")
    b = product_ref(product_id=2, purchase_price="0.19")
    sales = [
        sale(date(2024, 1, d), sale_item(a, d % 4 + 1, "4.99", str(d % 3 * 5)), sale_item(b, 2, "0.55"), sale_id=d)
        for d in range(1, 31, 3)
    ]
    expenses = [expense(date(2024, 1, d), "3.21", expense_id=d) for d in range(2, 31, 5)]

    report = compute_net_profit(sales, expenses, JANUARY, tzinfo=tz.UTC)

    assert sum(d.net_profit for d in report.daily_data) == report.net_profit
    assert sum(d.operating_expenses for d in report.daily_data) == report.total_operating_expenses


def test_expenses_outside_range_are_ignored():
    expenses = [
        expense(date(2023, 12, 31), "100.00", expense_id=1),
        expense(date(2024, 1, 31), "7.00", expense_id=2),
        expense(date(2024, 2, 1), "100.00", expense_id=3),
    ]

    report = compute_operating_expenses(expenses, JANUARY)

    assert report.total_expenses == Decimal("7.00")
    assert [e.id for e in report.expenses] == [2]


def test_expense_categories():
    expenses = [
        expense(date(2024, 1, 1), "900.00", category_id=1, expense_id=1),
        expense(date(2024, 1, 2), "50.00", category_id=None, expense_id=2),
        expense(date(2024, 1, 3), "25.00", category_id=77, expense_id=3),
    ]

    report = compute_operating_expenses(expenses, JANUARY, [category(1, "Rent")])

    assert report.expenses_by_category == {
        "Rent": Decimal("900.00"),
        "Uncategorized": Decimal("75.00"),
    }


def test_service_combines_sales_and_expenses(temp_db, product_service, sale_service, expense_service):
    widget = product_service.create_product("Widget", Decimal("10.00"), Decimal("5.00"), stock=5)
    sale_service.record_sale(
        [CartLine(product_id=widget, quantity=2)],
        created_at=datetime(2024, 1, 10, 15, 0, tzinfo=tz.UTC),
    )
    expense_service.add_expense(Decimal("5.00"), "Cleaning", date(2024, 1, 11))

    report = NetProfitService(temp_db, tzinfo=tz.UTC).get_report(JANUARY)

    assert report.net_profit == Decimal("5")
    assert report.net_margin == Decimal("25")


def test_add_expense_validation(expense_service):
    with pytest.raises(ValidationError):
        expense_service.add_expense(Decimal("0"), "Nothing", date(2024, 1, 1))
    with pytest.raises(ValidationError):
        expense_service.add_expense(Decimal("10"), "   ", date(2024, 1, 1))
    with pytest.raises(NotFoundError):
        expense_service.add_expense(Decimal("10"), "Rent", date(2024, 1, 1), category_name="Nope")


def test_add_expense_with_category(expense_service, category_service):
    category_service.create_category("Utilities")

    expense_service.add_expense(Decimal("80"), "Power", date(2024, 1, 4), category_name="Utilities")

    report = expense_service.get_report(JANUARY)
    assert report.expenses_by_category == {"Utilities": Decimal("80")}
