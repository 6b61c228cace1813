"""Tests for break-even analysis."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from dateutil import tz

from builders import expense, investment, product_ref, sale, sale_item
from retailmetrics.domain.break_even import (
    DEFAULT_SCENARIOS,
    BreakEvenInputs,
    BreakEvenPeriod,
    BreakEvenService,
    build_inputs,
    compute_break_even,
    compute_break_even_chart,
    compute_scenarios,
    earliest_activity,
    resolve_period,
    run_scenario,
)
from retailmetrics.domain.entities import CartLine, DateRange
from retailmetrics.domain.errors import ValidationError
from retailmetrics.domain.net_profit import compute_net_profit
from retailmetrics.domain.reports import BreakEvenScenario

AS_OF = date(2024, 3, 31)


def _inputs(
    fixed_costs="1000",
    revenue="2000",
    cogs="1200",
    units=100,
    investment="5000",
    profit="1000",
    days=100,
):
    start = date(2024, 1, 1)
    return BreakEvenInputs(
        date_range=DateRange(start, start + timedelta(days=days - 1)),
        total_investment=Decimal(investment),
        cumulative_profit=Decimal(profit),
        fixed_costs=Decimal(fixed_costs),
        total_revenue=Decimal(revenue),
        total_cogs=Decimal(cogs),
        units_sold=units,
    )


def test_contribution_margin_and_break_even_units():
    """Revenue 20 and variable cost 12 per unit against 1000 fixed costs."""
    metrics = compute_break_even(_inputs(), AS_OF)

    assert metrics.revenue_per_unit == Decimal("20")
    assert metrics.variable_costs_per_unit == Decimal("12")
    assert metrics.contribution_margin == Decimal("8")
    assert metrics.contribution_margin_ratio == Decimal("0.4")
    assert metrics.break_even_units == Decimal("125")
    assert metrics.break_even_sales == Decimal("2500")


@pytest.mark.parametrize("cogs", ["2000", "2500"])
def test_break_even_units_undefined_without_positive_margin(cogs):
    metrics = compute_break_even(_inputs(cogs=cogs), AS_OF)

    assert metrics.contribution_margin <= 0
    assert metrics.break_even_units is None
    assert metrics.break_even_sales is None


def test_no_units_sold_gives_zero_per_unit_values():
    metrics = compute_break_even(_inputs(revenue="0", cogs="0", units=0), AS_OF)

    assert metrics.revenue_per_unit == 0
    assert metrics.variable_costs_per_unit == 0
    assert metrics.contribution_margin_ratio == 0
    assert metrics.break_even_units is None


def test_progress_and_projection():
    # 1000 profit over 100 days is 10 per day; 4000 still to recover
    metrics = compute_break_even(_inputs(), AS_OF)

    assert metrics.break_even_point == Decimal("5000")
    assert metrics.break_even_percentage == Decimal("20")
    assert metrics.days_to_break_even == Decimal("400")
    assert metrics.projected_break_even_date == date(2025, 5, 5)


def test_projection_rounds_partial_days_up():
    metrics = compute_break_even(_inputs(investment="1005", profit="1000"), AS_OF)

    assert metrics.days_to_break_even == Decimal("0.5")
    assert metrics.projected_break_even_date == date(2024, 4, 1)


def test_percentage_is_capped_once_recovered():
    metrics = compute_break_even(_inputs(investment="500", profit="1000"), AS_OF)

    assert metrics.break_even_percentage == Decimal("100")
    assert metrics.days_to_break_even == 0
    assert metrics.projected_break_even_date == AS_OF


def test_losses_leave_days_undefined():
    metrics = compute_break_even(_inputs(profit="-300"), AS_OF)

    assert metrics.days_to_break_even is None
    assert metrics.projected_break_even_date is None


def test_no_investment_gives_zero_percentage():
    metrics = compute_break_even(_inputs(investment="0"), AS_OF)

    assert metrics.break_even_percentage == 0
    assert metrics.days_to_break_even == 0


def test_base_case_matches_plain_metrics():
    inputs = _inputs()
    base = run_scenario(inputs, DEFAULT_SCENARIOS[0], AS_OF)
    metrics = compute_break_even(inputs, AS_OF)

    assert base.scenario.name == "Base Case"
    assert base.break_even_units == metrics.break_even_units
    assert base.break_even_sales == metrics.break_even_sales
    # 1 unit a day at a margin of 8, minus 10 of fixed costs a day
    assert base.daily_profit == Decimal("-2")
    assert base.break_even_days is None


def test_scenario_multipliers():
    scenario = BreakEvenScenario(
        "Cheaper supplier",
        fixed_cost_multiplier=Decimal("1"),
        variable_cost_multiplier=Decimal("0.5"),
        revenue_multiplier=Decimal("1"),
    )

    result = run_scenario(_inputs(), scenario, AS_OF)

    assert result.variable_costs_per_unit == Decimal("6")
    assert result.contribution_margin == Decimal("14")
    assert result.daily_profit == Decimal("4")
    assert result.break_even_days == Decimal("1000")
    assert result.break_even_date == date(2026, 12, 26)


def test_scenarios_are_pure():
    inputs = _inputs()

    first = compute_scenarios(inputs, AS_OF)
    second = compute_scenarios(inputs, AS_OF)

    assert first == second
    assert [r.scenario.name for r in first] == [
        "Base Case",
        "Optimistic",
        "Pessimistic",
        "Cost Reduction",
        "Revenue Growth",
    ]


def test_optimistic_beats_pessimistic():
    results = {r.scenario.name: r for r in compute_scenarios(_inputs(), AS_OF)}

    assert results["Optimistic"].break_even_units < results["Base Case"].break_even_units
    assert results["Pessimistic"].break_even_units > results["Base Case"].break_even_units


def test_resolve_relative_periods():
    assert resolve_period("3m", AS_OF) == DateRange(date(2023, 12, 31), AS_OF)
    assert resolve_period(BreakEvenPeriod.SIX_MONTHS, AS_OF) == DateRange(date(2023, 9, 30), AS_OF)
    assert resolve_period("1y", AS_OF) == DateRange(date(2023, 3, 31), AS_OF)


def test_resolve_all_period_starts_at_earliest_activity():
    assert resolve_period("all", AS_OF, earliest=date(2023, 6, 1)) == DateRange(date(2023, 6, 1), AS_OF)
    assert resolve_period("all", AS_OF) == DateRange(AS_OF, AS_OF)


def test_resolve_custom_period():
    assert resolve_period("custom", AS_OF, date(2024, 1, 1), date(2024, 1, 31)) == DateRange(
        date(2024, 1, 1), date(2024, 1, 31)
    )
    with pytest.raises(ValidationError):
        resolve_period("custom", AS_OF, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        resolve_period("2w", AS_OF)


def test_earliest_activity():
    widget = product_ref()
    sales = [sale(date(2024, 2, 1), sale_item(widget))]
    expenses = [expense(date(2024, 1, 15), "10")]
    investments = [investment("100", date(2023, 12, 1), investment_id=1), investment("50", None, investment_id=2)]

    assert earliest_activity(sales, expenses, investments, tz.UTC) == date(2023, 12, 1)
    assert earliest_activity([], [], [investment("50")], tz.UTC) is None


def test_inputs_come_from_net_profit_report():
    widget = product_ref(purchase_price="5.00")
    january = DateRange(date(2024, 1, 1), date(2024, 1, 31))
    report = compute_net_profit(
        [sale(date(2024, 1, 10), sale_item(widget, quantity=2, price="10.00"))],
        [expense(date(2024, 1, 11), "5.00")],
        january,
        tzinfo=tz.UTC,
    )

    inputs = build_inputs(report, [investment("600", date(2024, 1, 1)), investment("400", investment_id=2)])

    assert inputs.total_investment == Decimal("1000")
    assert inputs.cumulative_profit == Decimal("5")
    assert inputs.fixed_costs == Decimal("5.00")
    assert inputs.units_sold == 2
    assert inputs.revenue_per_unit == Decimal("10")


def test_chart_tracks_cumulative_profit_and_investment():
    widget = product_ref(purchase_price="5.00")
    january = DateRange(date(2024, 1, 1), date(2024, 1, 31))
    report = compute_net_profit(
        [
            sale(date(2024, 1, 10), sale_item(widget, quantity=2, price="10.00"), sale_id=1),
            sale(date(2024, 1, 20), sale_item(widget, quantity=4, price="10.00"), sale_id=2),
        ],
        [],
        january,
        tzinfo=tz.UTC,
    )
    investments = [
        investment("1000", date(2023, 12, 1), investment_id=1),
        investment("200", None, investment_id=2),
        investment("300", date(2024, 1, 15), investment_id=3),
    ]

    points = compute_break_even_chart(report, investments)

    assert [p.date for p in points] == [date(2024, 1, 10), date(2024, 1, 15), date(2024, 1, 20)]
    assert [p.cumulative_profit for p in points] == [Decimal("10"), Decimal("10"), Decimal("30")]
    assert [p.break_even_point for p in points] == [Decimal("1200"), Decimal("1500"), Decimal("1500")]
    assert points[1].investment == Decimal("300")


def test_service_all_period(temp_db, product_service, sale_service, investment_service, expense_service):
    widget = product_service.create_product("Widget", Decimal("20.00"), Decimal("12.00"), stock=500)
    investment_service.add_investment(Decimal("5000"), "Fit-out", date(2024, 1, 1))
    expense_service.add_expense(Decimal("100"), "Rent", date(2024, 1, 1))
    sale_service.record_sale(
        [CartLine(product_id=widget, quantity=50)],
        created_at=datetime(2024, 1, 10, 12, 0, tzinfo=tz.UTC),
    )

    service = BreakEvenService(temp_db, tzinfo=tz.UTC)
    metrics = service.get_metrics("all", as_of=date(2024, 1, 10))

    assert metrics.date_range == DateRange(date(2024, 1, 1), date(2024, 1, 10))
    assert metrics.fixed_costs == Decimal("100")
    assert metrics.contribution_margin == Decimal("8")
    assert metrics.break_even_units == Decimal("12.5")
    # 400 gross profit minus 100 rent over 10 days
    assert metrics.cumulative_profit == Decimal("300")
    assert metrics.days_to_break_even == Decimal("4700") / Decimal("30")
    assert metrics.projected_break_even_date == date(2024, 6, 15)

    results = service.get_scenarios("all", as_of=date(2024, 1, 10))
    assert len(results) == len(DEFAULT_SCENARIOS)

    points = service.get_chart_data("all", as_of=date(2024, 1, 10))
    assert points[-1].cumulative_profit == metrics.cumulative_profit
    assert points[-1].break_even_point == Decimal("5000")


def test_service_custom_period(temp_db, investment_service):
    investment_service.add_investment(Decimal("100"))
    service = BreakEvenService(temp_db, tzinfo=tz.UTC)

    metrics = service.get_metrics(
        "custom", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), as_of=date(2024, 1, 31)
    )

    assert metrics.total_investment == Decimal("100")
    assert metrics.cumulative_profit == 0
    assert metrics.days_to_break_even is None
