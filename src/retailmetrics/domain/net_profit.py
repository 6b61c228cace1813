"""Net profit aggregation."""

import logging
from datetime import tzinfo as TZInfo
from typing import Optional, Sequence

from retailmetrics.database.base import DataSource
from retailmetrics.domain.calculations import percent_of
from retailmetrics.domain.cogs import compute_cogs
from retailmetrics.domain.entities import Category, DateRange, Expense, Sale, ZERO
from retailmetrics.domain.expenses import compute_operating_expenses
from retailmetrics.domain.reports import (
    COGSReport,
    DailyNetProfit,
    NetProfitReport,
    OperatingExpensesReport,
)

logger = logging.getLogger(__name__)


def combine_net_profit(
    cogs_report: COGSReport, expenses_report: OperatingExpensesReport
) -> NetProfitReport:
    """Subtract operating expenses from the gross profit of a COGS report.

    The daily series covers every day with a sale or an expense, so summing
    its net profit reproduces the report's net profit.
    """
    cogs_by_day = {d.date: d for d in cogs_report.daily_data}
    days = sorted(set(cogs_by_day) | set(expenses_report.expenses_by_day))

    daily_data = []
    for day in days:
        cogs_day = cogs_by_day.get(day)
        revenue = cogs_day.revenue if cogs_day is not None else ZERO
        cogs = cogs_day.cogs if cogs_day is not None else ZERO
        operating_expenses = expenses_report.expenses_by_day.get(day, ZERO)
        gross_profit = revenue - cogs
        daily_data.append(
            DailyNetProfit(
                date=day,
                revenue=revenue,
                cogs=cogs,
                gross_profit=gross_profit,
                operating_expenses=operating_expenses,
                net_profit=gross_profit - operating_expenses,
            )
        )

    net_profit = cogs_report.gross_profit - expenses_report.total_expenses
    return NetProfitReport(
        date_range=cogs_report.date_range,
        total_revenue=cogs_report.total_revenue,
        total_cogs=cogs_report.total_cogs,
        gross_profit=cogs_report.gross_profit,
        gross_margin=cogs_report.gross_margin,
        total_operating_expenses=expenses_report.total_expenses,
        net_profit=net_profit,
        net_margin=percent_of(net_profit, cogs_report.total_revenue),
        units_sold=cogs_report.items_sold,
        operating_expenses=expenses_report.expenses,
        operating_expenses_by_category=expenses_report.expenses_by_category,
        daily_data=tuple(daily_data),
    )


def compute_net_profit(
    sales: Sequence[Sale],
    expenses: Sequence[Expense],
    date_range: DateRange,
    categories: Sequence[Category] = (),
    tzinfo: Optional[TZInfo] = None,
) -> NetProfitReport:
    """Compute the net profit report of a date range from raw rows."""
    cogs_report = compute_cogs(sales, date_range, categories, tzinfo=tzinfo)
    expenses_report = compute_operating_expenses(expenses, date_range, categories)
    return combine_net_profit(cogs_report, expenses_report)


class NetProfitService:
    """Service fetching sales and expenses and computing net profit."""

    def __init__(self, db: DataSource, tzinfo: Optional[TZInfo] = None):
        """Initialize net profit service.

        Args:
            db: Data source instance
            tzinfo: Timezone that defines calendar days
        """
        self.db = db
        self.tzinfo = tzinfo

    def get_report(self, date_range: DateRange) -> NetProfitReport:
        sales = self.db.list_sales(date_range.start, date_range.end, tzinfo=self.tzinfo)
        expenses = self.db.list_expenses(date_range.start, date_range.end)
        logger.debug(
            "Computing net profit over %d sales and %d expenses", len(sales), len(expenses)
        )
        return compute_net_profit(
            sales, expenses, date_range, self.db.list_categories(), tzinfo=self.tzinfo
        )
