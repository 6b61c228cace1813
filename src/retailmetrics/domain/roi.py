"""Return on investment aggregation."""

import logging
from collections import defaultdict
from datetime import tzinfo as TZInfo
from decimal import Decimal
from typing import Optional, Sequence

from retailmetrics.database.base import DataSource
from retailmetrics.domain.calculations import (
    month_key,
    month_ranges,
    percent_of,
    positive_ratio,
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
from retailmetrics.domain.net_profit import compute_net_profit
from retailmetrics.domain.reports import MonthlyROI, ROIReport

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
DAYS_PER_YEAR = Decimal(365)


def annualize_roi(roi: Decimal, days: int) -> Optional[Decimal]:
    """Compound a period ROI percentage to a yearly rate.

    Returns None when the growth factor is negative, because a fractional
    power of a negative number has no real value.
    """
    growth = 1 + roi / HUNDRED
    if growth < 0:
        return None
    return (growth ** (DAYS_PER_YEAR / Decimal(days)) - 1) * HUNDRED


def compute_roi(
    sales: Sequence[Sale],
    expenses: Sequence[Expense],
    investments: Sequence[InitialInvestment],
    date_range: DateRange,
    categories: Sequence[Category] = (),
    tzinfo: Optional[TZInfo] = None,
) -> ROIReport:
    """Compute the ROI report of a date range.

    Net profit follows the net profit rules, applied once per calendar month
    of the range. Every investment counts toward the total investment; only
    dated investments count toward the cumulative monthly investment.

    Args:
        sales: Sales with their items
        expenses: Operating expenses
        investments: All initial investments
        date_range: Calendar days to report on
        categories: Known categories
        tzinfo: Timezone that defines calendar days

    Returns:
        ROIReport for the range
    """
    total_investment = sum((inv.amount for inv in investments), ZERO)
    dated = sorted(
        (inv for inv in investments if inv.investment_date is not None),
        key=lambda inv: inv.investment_date,
    )

    monthly_data = []
    net_profit = ZERO
    total_revenue = ZERO
    for month in month_ranges(date_range):
        report = compute_net_profit(sales, expenses, month, categories, tzinfo=tzinfo)
        net_profit += report.net_profit
        total_revenue += report.total_revenue

        invested = sum(
            (inv.amount for inv in dated if inv.investment_date <= month.end), ZERO
        )
        monthly_data.append(
            MonthlyROI(
                month=month_key(month.start),
                net_profit=report.net_profit,
                investment=invested,
                roi=percent_of(report.net_profit, invested),
            )
        )

    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for inv in investments:
        key = inv.description.strip() if inv.description and inv.description.strip() else None
        by_category[key or UNCATEGORIZED] += inv.amount

    roi = percent_of(net_profit, total_investment)

    payback_period = None
    if total_investment > 0 and monthly_data:
        average_monthly_profit = net_profit / Decimal(len(monthly_data))
        payback_period = positive_ratio(total_investment, average_monthly_profit)

    break_even_point = None
    if total_investment > 0 and total_revenue > 0:
        break_even_point = positive_ratio(total_investment, net_profit / total_revenue)

    profitability_index = None
    if total_investment > 0:
        profitability_index = (net_profit + total_investment) / total_investment

    return ROIReport(
        date_range=date_range,
        total_investment=total_investment,
        net_profit=net_profit,
        roi=roi,
        annualized_roi=annualize_roi(roi, date_range.days),
        payback_period=payback_period,
        break_even_point=break_even_point,
        profitability_index=profitability_index,
        monthly_data=tuple(monthly_data),
        investments_by_category=dict(by_category),
        investments=tuple(investments),
    )


class ROIService:
    """Service fetching investments and profit history and computing ROI."""

    def __init__(self, db: DataSource, tzinfo: Optional[TZInfo] = None):
        """Initialize ROI service.

        Args:
            db: Data source instance
            tzinfo: Timezone that defines calendar days
        """
        self.db = db
        self.tzinfo = tzinfo

    def get_report(self, date_range: DateRange) -> ROIReport:
        investments = self.db.list_investments()
        sales = self.db.list_sales(date_range.start, date_range.end, tzinfo=self.tzinfo)
        expenses = self.db.list_expenses(date_range.start, date_range.end)
        logger.debug(
            "Computing ROI over %d sales, %d expenses and %d investments",
            len(sales),
            len(expenses),
            len(investments),
        )
        return compute_roi(
            sales,
            expenses,
            investments,
            date_range,
            self.db.list_categories(),
            tzinfo=self.tzinfo,
        )
