"""Break-even analysis.

A unit is one product unit sold. Fixed costs are the operating expenses of
the analysed period and variable costs are the cost of the goods sold, so
the contribution margin is what each unit sold adds toward covering the
operating expenses. Progress toward recovering the initial investment is
extrapolated from the average daily net profit of the period.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo as TZInfo
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from dateutil.relativedelta import relativedelta

from retailmetrics.database.base import DataSource
from retailmetrics.domain.calculations import (
    local_date,
    percent_of,
    positive_ratio,
    ratio,
    whole_days,
)
from retailmetrics.domain.entities import (
    Category,
    DateRange,
    Expense,
    HUNDRED,
    InitialInvestment,
    Sale,
    ZERO,
)
from retailmetrics.domain.errors import ValidationError
from retailmetrics.domain.net_profit import compute_net_profit
from retailmetrics.domain.reports import (
    BreakEvenChartPoint,
    BreakEvenMetrics,
    BreakEvenScenario,
    NetProfitReport,
    ScenarioResult,
)

logger = logging.getLogger(__name__)


class BreakEvenPeriod(str, Enum):
    """Look-back windows offered by the break-even report."""

    ALL = "all"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    CUSTOM = "custom"


DEFAULT_SCENARIOS: tuple[BreakEvenScenario, ...] = (
    BreakEvenScenario("Base Case"),
    BreakEvenScenario(
        "Optimistic",
        variable_cost_multiplier=Decimal("0.9"),
        revenue_multiplier=Decimal("1.1"),
    ),
    BreakEvenScenario(
        "Pessimistic",
        fixed_cost_multiplier=Decimal("1.1"),
        variable_cost_multiplier=Decimal("1.1"),
        revenue_multiplier=Decimal("0.9"),
    ),
    BreakEvenScenario(
        "Cost Reduction",
        fixed_cost_multiplier=Decimal("0.9"),
        variable_cost_multiplier=Decimal("0.9"),
    ),
    BreakEvenScenario("Revenue Growth", revenue_multiplier=Decimal("1.2")),
)


@dataclass(frozen=True)
class BreakEvenInputs:
    """Period totals every break-even figure is derived from."""

    date_range: DateRange
    total_investment: Decimal
    cumulative_profit: Decimal
    fixed_costs: Decimal
    total_revenue: Decimal
    total_cogs: Decimal
    units_sold: int

    @property
    def revenue_per_unit(self) -> Decimal:
        return ratio(self.total_revenue, Decimal(self.units_sold))

    @property
    def variable_costs_per_unit(self) -> Decimal:
        return ratio(self.total_cogs, Decimal(self.units_sold))

    @property
    def remaining_investment(self) -> Decimal:
        return max(ZERO, self.total_investment - self.cumulative_profit)


def resolve_period(
    period: BreakEvenPeriod | str,
    as_of: date,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    earliest: Optional[date] = None,
) -> DateRange:
    """Turn a break-even period choice into a date range ending at ``as_of``.

    Args:
        period: Period choice
        as_of: Last day of relative periods
        start_date: First day of a custom period
        end_date: Last day of a custom period
        earliest: First day with any activity, used by the ``all`` period

    Raises:
        ValidationError: If the period is unknown or a custom period lacks dates
    """
    try:
        period = BreakEvenPeriod(period)
    except ValueError:
        choices = ", ".join(p.value for p in BreakEvenPeriod)
        raise ValidationError(f"Unknown break-even period '{period}'. Supported periods: {choices}")

    if period == BreakEvenPeriod.CUSTOM:
        if start_date is None or end_date is None:
            raise ValidationError("A custom period needs both a start and an end date")
        return DateRange(start_date, end_date)
    if period == BreakEvenPeriod.THREE_MONTHS:
        return DateRange(as_of - relativedelta(months=3), as_of)
    if period == BreakEvenPeriod.SIX_MONTHS:
        return DateRange(as_of - relativedelta(months=6), as_of)
    if period == BreakEvenPeriod.ONE_YEAR:
        return DateRange(as_of - relativedelta(years=1), as_of)
    return DateRange(min(earliest or as_of, as_of), as_of)


def build_inputs(
    net_profit_report: NetProfitReport, investments: Sequence[InitialInvestment]
) -> BreakEvenInputs:
    return BreakEvenInputs(
        date_range=net_profit_report.date_range,
        total_investment=sum((inv.amount for inv in investments), ZERO),
        cumulative_profit=net_profit_report.net_profit,
        fixed_costs=net_profit_report.total_operating_expenses,
        total_revenue=net_profit_report.total_revenue,
        total_cogs=net_profit_report.total_cogs,
        units_sold=net_profit_report.units_sold,
    )


def _projected_date(as_of: date, days: Optional[Decimal]) -> Optional[date]:
    if days is None:
        return None
    return as_of + timedelta(days=whole_days(days))


def compute_break_even(inputs: BreakEvenInputs, as_of: date) -> BreakEvenMetrics:
    """Compute break-even metrics from period totals.

    Break-even units and sales are None when the contribution margin is not
    positive, and the days to break even are None when the business is not
    making a daily profit.
    """
    revenue_per_unit = inputs.revenue_per_unit
    variable_costs_per_unit = inputs.variable_costs_per_unit
    contribution_margin = revenue_per_unit - variable_costs_per_unit

    break_even_units = positive_ratio(inputs.fixed_costs, contribution_margin)
    break_even_sales = None
    if break_even_units is not None:
        break_even_sales = break_even_units * revenue_per_unit

    average_daily_profit = inputs.cumulative_profit / Decimal(inputs.date_range.days)
    days_to_break_even = positive_ratio(inputs.remaining_investment, average_daily_profit)

    return BreakEvenMetrics(
        date_range=inputs.date_range,
        total_investment=inputs.total_investment,
        cumulative_profit=inputs.cumulative_profit,
        break_even_point=inputs.total_investment,
        break_even_percentage=min(
            HUNDRED, percent_of(inputs.cumulative_profit, inputs.total_investment)
        ),
        days_to_break_even=days_to_break_even,
        projected_break_even_date=_projected_date(as_of, days_to_break_even),
        fixed_costs=inputs.fixed_costs,
        variable_costs_per_unit=variable_costs_per_unit,
        revenue_per_unit=revenue_per_unit,
        contribution_margin=contribution_margin,
        contribution_margin_ratio=ratio(contribution_margin, revenue_per_unit),
        break_even_units=break_even_units,
        break_even_sales=break_even_sales,
    )


def run_scenario(
    inputs: BreakEvenInputs, scenario: BreakEvenScenario, as_of: date
) -> ScenarioResult:
    """Recompute break-even figures with a scenario's multipliers applied.

    The daily profit of a scenario is the period's units per day times the
    adjusted contribution margin, minus the adjusted fixed costs per day.
    """
    fixed_costs = inputs.fixed_costs * scenario.fixed_cost_multiplier
    variable_costs_per_unit = inputs.variable_costs_per_unit * scenario.variable_cost_multiplier
    revenue_per_unit = inputs.revenue_per_unit * scenario.revenue_multiplier
    contribution_margin = revenue_per_unit - variable_costs_per_unit

    break_even_units = positive_ratio(fixed_costs, contribution_margin)
    break_even_sales = None
    if break_even_units is not None:
        break_even_sales = break_even_units * revenue_per_unit

    days = Decimal(inputs.date_range.days)
    daily_profit = Decimal(inputs.units_sold) / days * contribution_margin - fixed_costs / days
    break_even_days = positive_ratio(inputs.remaining_investment, daily_profit)

    return ScenarioResult(
        scenario=scenario,
        fixed_costs=fixed_costs,
        variable_costs_per_unit=variable_costs_per_unit,
        revenue_per_unit=revenue_per_unit,
        contribution_margin=contribution_margin,
        contribution_margin_ratio=ratio(contribution_margin, revenue_per_unit),
        break_even_units=break_even_units,
        break_even_sales=break_even_sales,
        daily_profit=daily_profit,
        break_even_days=break_even_days,
        break_even_date=_projected_date(as_of, break_even_days),
    )


def compute_scenarios(
    inputs: BreakEvenInputs,
    as_of: date,
    scenarios: Sequence[BreakEvenScenario] = DEFAULT_SCENARIOS,
) -> list[ScenarioResult]:
    return [run_scenario(inputs, scenario, as_of) for scenario in scenarios]


def compute_break_even_chart(
    net_profit_report: NetProfitReport, investments: Sequence[InitialInvestment]
) -> list[BreakEvenChartPoint]:
    """Build the cumulative profit and investment series of a period.

    Investments dated before the period, or without a date, are already part
    of the break-even line on the first day.
    """
    date_range = net_profit_report.date_range
    baseline = ZERO
    invested_by_day: dict[date, Decimal] = {}
    for inv in investments:
        if inv.investment_date is None or inv.investment_date < date_range.start:
            baseline += inv.amount
        elif date_range.contains(inv.investment_date):
            invested_by_day[inv.investment_date] = (
                invested_by_day.get(inv.investment_date, ZERO) + inv.amount
            )

    profit_by_day = {d.date: d.net_profit for d in net_profit_report.daily_data}
    days = sorted(set(profit_by_day) | set(invested_by_day))

    points = []
    cumulative_profit = ZERO
    cumulative_investment = baseline
    for day in days:
        invested = invested_by_day.get(day, ZERO)
        profit = profit_by_day.get(day, ZERO)
        cumulative_investment += invested
        cumulative_profit += profit
        points.append(
            BreakEvenChartPoint(
                date=day,
                investment=invested,
                profit=profit,
                cumulative_profit=cumulative_profit,
                break_even_point=cumulative_investment,
            )
        )
    return points


def earliest_activity(
    sales: Sequence[Sale],
    expenses: Sequence[Expense],
    investments: Sequence[InitialInvestment],
    tzinfo: Optional[TZInfo] = None,
) -> Optional[date]:
    """Return the first day with a sale, expense or dated investment."""
    days = [local_date(sale.created_at, tzinfo) for sale in sales]
    days.extend(expense.payment_date for expense in expenses)
    days.extend(inv.investment_date for inv in investments if inv.investment_date is not None)
    return min(days) if days else None


class BreakEvenService:
    """Service fetching history and computing break-even reports."""

    def __init__(self, db: DataSource, tzinfo: Optional[TZInfo] = None):
        """Initialize break-even service.

        Args:
            db: Data source instance
            tzinfo: Timezone that defines calendar days
        """
        self.db = db
        self.tzinfo = tzinfo

    def _load(
        self,
        period: BreakEvenPeriod | str,
        as_of: date,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> tuple[NetProfitReport, list[InitialInvestment]]:
        investments = self.db.list_investments()
        categories: Sequence[Category] = self.db.list_categories()

        if period == BreakEvenPeriod.ALL:
            sales = self.db.list_sales(tzinfo=self.tzinfo)
            expenses = self.db.list_expenses()
            earliest = earliest_activity(sales, expenses, investments, self.tzinfo)
            date_range = resolve_period(period, as_of, earliest=earliest)
        else:
            date_range = resolve_period(period, as_of, start_date, end_date)
            sales = self.db.list_sales(date_range.start, date_range.end, tzinfo=self.tzinfo)
            expenses = self.db.list_expenses(date_range.start, date_range.end)

        logger.debug(
            "Break-even over %s..%s: %d sales, %d expenses, %d investments",
            date_range.start,
            date_range.end,
            len(sales),
            len(expenses),
            len(investments),
        )
        report = compute_net_profit(sales, expenses, date_range, categories, tzinfo=self.tzinfo)
        return report, investments

    def get_metrics(
        self,
        period: BreakEvenPeriod | str = BreakEvenPeriod.ALL,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        as_of: Optional[date] = None,
    ) -> BreakEvenMetrics:
        as_of = as_of or date.today()
        report, investments = self._load(period, as_of, start_date, end_date)
        return compute_break_even(build_inputs(report, investments), as_of)

    def get_scenarios(
        self,
        period: BreakEvenPeriod | str = BreakEvenPeriod.ALL,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        as_of: Optional[date] = None,
        scenarios: Sequence[BreakEvenScenario] = DEFAULT_SCENARIOS,
    ) -> list[ScenarioResult]:
        as_of = as_of or date.today()
        report, investments = self._load(period, as_of, start_date, end_date)
        return compute_scenarios(build_inputs(report, investments), as_of, scenarios)

    def get_chart_data(
        self,
        period: BreakEvenPeriod | str = BreakEvenPeriod.ALL,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        as_of: Optional[date] = None,
    ) -> list[BreakEvenChartPoint]:
        as_of = as_of or date.today()
        report, investments = self._load(period, as_of, start_date, end_date)
        return compute_break_even_chart(report, investments)
