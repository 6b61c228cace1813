"""Report models produced by the metrics aggregators.

All values are plain ``Decimal`` numbers. Percentages are expressed on a
0-100 scale. ``None`` marks a value that is undefined for the inputs (for
example a break-even unit count when the contribution margin is not
positive); it is never replaced by zero.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from retailmetrics.domain.entities import (
    DateRange,
    Expense,
    InitialInvestment,
    RecordId,
)


@dataclass(frozen=True)
class ProductCOGS:
    name: str
    quantity: int
    cost: Decimal
    revenue: Decimal
    profit: Decimal
    margin: Decimal


@dataclass(frozen=True)
class DailyCOGS:
    date: date
    cogs: Decimal
    revenue: Decimal
    profit: Decimal


@dataclass(frozen=True)
class COGSReport:
    """Cost of goods sold for a date range."""

    date_range: DateRange
    total_cogs: Decimal
    total_revenue: Decimal
    gross_profit: Decimal
    gross_margin: Decimal
    items_sold: int
    sales_count: int
    cogs_by_product: dict[Optional[RecordId], ProductCOGS] = field(default_factory=dict)
    cogs_by_category: dict[str, Decimal] = field(default_factory=dict)
    daily_data: tuple[DailyCOGS, ...] = ()


@dataclass(frozen=True)
class OperatingExpensesReport:
    date_range: DateRange
    total_expenses: Decimal
    expenses_by_category: dict[str, Decimal] = field(default_factory=dict)
    expenses_by_day: dict[date, Decimal] = field(default_factory=dict)
    expenses: tuple[Expense, ...] = ()


@dataclass(frozen=True)
class DailyNetProfit:
    date: date
    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class NetProfitReport:
    """Revenue, COGS and operating expenses combined into net profit."""

    date_range: DateRange
    total_revenue: Decimal
    total_cogs: Decimal
    gross_profit: Decimal
    gross_margin: Decimal
    total_operating_expenses: Decimal
    net_profit: Decimal
    net_margin: Decimal
    units_sold: int = 0
    operating_expenses: tuple[Expense, ...] = ()
    operating_expenses_by_category: dict[str, Decimal] = field(default_factory=dict)
    daily_data: tuple[DailyNetProfit, ...] = ()


@dataclass(frozen=True)
class BreakEvenMetrics:
    date_range: DateRange
    total_investment: Decimal
    cumulative_profit: Decimal
    break_even_point: Decimal
    break_even_percentage: Decimal
    days_to_break_even: Optional[Decimal]
    projected_break_even_date: Optional[date]
    fixed_costs: Decimal
    variable_costs_per_unit: Decimal
    revenue_per_unit: Decimal
    contribution_margin: Decimal
    contribution_margin_ratio: Decimal
    break_even_units: Optional[Decimal]
    break_even_sales: Optional[Decimal]


@dataclass(frozen=True)
class BreakEvenScenario:
    """Named what-if multipliers applied to the base break-even inputs."""

    name: str
    fixed_cost_multiplier: Decimal = Decimal("1")
    variable_cost_multiplier: Decimal = Decimal("1")
    revenue_multiplier: Decimal = Decimal("1")


@dataclass(frozen=True)
class ScenarioResult:
    scenario: BreakEvenScenario
    fixed_costs: Decimal
    variable_costs_per_unit: Decimal
    revenue_per_unit: Decimal
    contribution_margin: Decimal
    contribution_margin_ratio: Decimal
    break_even_units: Optional[Decimal]
    break_even_sales: Optional[Decimal]
    daily_profit: Decimal
    break_even_days: Optional[Decimal]
    break_even_date: Optional[date]


@dataclass(frozen=True)
class BreakEvenChartPoint:
    date: date
    investment: Decimal
    profit: Decimal
    cumulative_profit: Decimal
    break_even_point: Decimal


@dataclass(frozen=True)
class MonthlyROI:
    month: str
    net_profit: Decimal
    investment: Decimal
    roi: Decimal


@dataclass(frozen=True)
class ROIReport:
    date_range: DateRange
    total_investment: Decimal
    net_profit: Decimal
    roi: Decimal
    annualized_roi: Optional[Decimal]
    payback_period: Optional[Decimal]
    break_even_point: Optional[Decimal]
    profitability_index: Optional[Decimal]
    monthly_data: tuple[MonthlyROI, ...] = ()
    investments_by_category: dict[str, Decimal] = field(default_factory=dict)
    investments: tuple[InitialInvestment, ...] = ()


@dataclass(frozen=True)
class ProductStockValue:
    product_id: RecordId
    name: str
    category_name: str
    stock: int
    has_sales: bool
    retail_value: Decimal
    cost_value: Decimal
    profit_potential: Decimal
    margin_potential: Decimal


@dataclass(frozen=True)
class CategoryStockValue:
    name: str
    product_count: int
    total_value: Decimal
    total_cost: Decimal
    has_sold_products: bool
    active_product_count: int
    active_total_value: Decimal
    active_total_cost: Decimal


@dataclass(frozen=True)
class StockSummary:
    """Inventory valuation split into active (sold) and inactive stock."""

    total_retail_value: Decimal
    total_cost_value: Decimal
    total_profit_potential: Decimal
    total_products: int
    total_units: int
    active_inventory_value: Decimal
    inactive_inventory_value: Decimal
    active_cost_value: Decimal
    active_profit_potential: Decimal
    active_product_count: int
    active_unit_count: int
    low_stock_value: Decimal
    high_stock_value: Decimal
    expired_value: Decimal
    expiring_soon_value: Decimal
    products: tuple[ProductStockValue, ...] = ()
    categories: tuple[CategoryStockValue, ...] = ()
