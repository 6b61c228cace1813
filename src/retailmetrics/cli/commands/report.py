"""Financial report commands."""

import logging
from datetime import date
from typing import Any, Callable, Iterable, Sequence

import click

from retailmetrics.cli.date_filters import date_range_options, resolve_report_range
from retailmetrics.cli.error_handling import handle_domain_error
from retailmetrics.config import ReportConfig, load_config
from retailmetrics.domain.break_even import BreakEvenPeriod, BreakEvenService
from retailmetrics.domain.cogs import COGSService
from retailmetrics.domain.errors import DataSourceError, DomainError
from retailmetrics.domain.net_profit import NetProfitService
from retailmetrics.domain.roi import ROIService
from retailmetrics.domain.session import ReportSession
from retailmetrics.domain.stock_value import StockValueService
from retailmetrics.utils.csv_export import ColumnSpec, write_csv
from retailmetrics.utils.currency import (
    format_number,
    format_optional_currency,
    format_percent,
)
from retailmetrics.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

COGS_PRODUCT_COLUMNS = (
    ColumnSpec("name", "Product"),
    ColumnSpec("quantity", "Quantity"),
    ColumnSpec("cost", "Cost"),
    ColumnSpec("revenue", "Revenue"),
    ColumnSpec("profit", "Profit"),
    ColumnSpec("margin", "Margin %"),
)

NET_PROFIT_DAILY_COLUMNS = (
    ColumnSpec("date", "Date"),
    ColumnSpec("revenue", "Revenue"),
    ColumnSpec("cogs", "COGS"),
    ColumnSpec("gross_profit", "Gross Profit"),
    ColumnSpec("operating_expenses", "Operating Expenses"),
    ColumnSpec("net_profit", "Net Profit"),
)

ROI_MONTHLY_COLUMNS = (
    ColumnSpec("month", "Month"),
    ColumnSpec("net_profit", "Net Profit"),
    ColumnSpec("investment", "Cumulative Investment"),
    ColumnSpec("roi", "ROI %"),
)

BREAK_EVEN_COLUMNS = (
    ColumnSpec("total_investment", "Total Investment"),
    ColumnSpec("cumulative_profit", "Cumulative Profit"),
    ColumnSpec("break_even_point", "Break-even Point"),
    ColumnSpec("break_even_percentage", "Progress %"),
    ColumnSpec("days_to_break_even", "Days to Break-even"),
    ColumnSpec("projected_break_even_date", "Projected Date"),
    ColumnSpec("fixed_costs", "Fixed Costs"),
    ColumnSpec("variable_costs_per_unit", "Variable Cost per Unit"),
    ColumnSpec("revenue_per_unit", "Revenue per Unit"),
    ColumnSpec("contribution_margin", "Contribution Margin"),
    ColumnSpec("contribution_margin_ratio", "Contribution Margin Ratio"),
    ColumnSpec("break_even_units", "Break-even Units"),
    ColumnSpec("break_even_sales", "Break-even Sales"),
)

SCENARIO_COLUMNS = (
    ColumnSpec("scenario", "Scenario", formatter=lambda scenario: scenario.name),
    ColumnSpec("fixed_costs", "Fixed Costs"),
    ColumnSpec("variable_costs_per_unit", "Variable Cost per Unit"),
    ColumnSpec("revenue_per_unit", "Revenue per Unit"),
    ColumnSpec("contribution_margin", "Contribution Margin"),
    ColumnSpec("break_even_units", "Break-even Units"),
    ColumnSpec("break_even_sales", "Break-even Sales"),
    ColumnSpec("daily_profit", "Daily Profit"),
    ColumnSpec("break_even_days", "Days to Break-even"),
    ColumnSpec("break_even_date", "Projected Date"),
)

CHART_COLUMNS = (
    ColumnSpec("date", "Date"),
    ColumnSpec("investment", "Investment"),
    ColumnSpec("profit", "Profit"),
    ColumnSpec("cumulative_profit", "Cumulative Profit"),
    ColumnSpec("break_even_point", "Break-even Point"),
)

STOCK_PRODUCT_COLUMNS = (
    ColumnSpec("name", "Product"),
    ColumnSpec("category_name", "Category"),
    ColumnSpec("stock", "Stock"),
    ColumnSpec("has_sales", "Has Sales"),
    ColumnSpec("retail_value", "Retail Value"),
    ColumnSpec("cost_value", "Cost Value"),
    ColumnSpec("profit_potential", "Profit Potential"),
    ColumnSpec("margin_potential", "Margin %"),
)

csv_option = click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False, writable=True),
    help="Also write the report rows to this CSV file",
)

retries_option = click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Times to re-run the report when the data source fails",
)


def load_report(ctx, loader: Callable[[Any], Any], params: Any, retries: int = 0) -> Any:
    """Run a report request, re-running it after data source failures."""
    session = ReportSession(loader)
    attempt = 0
    while True:
        try:
            if attempt == 0:
                return session.load(params)
            return session.refresh()
        except DataSourceError as e:
            if attempt >= retries:
                handle_domain_error(ctx, e)
            attempt += 1
            logger.warning("Report failed, retrying (%d/%d): %s", attempt, retries, e)
        except DomainError as e:
            handle_domain_error(ctx, e)


def _config(ctx) -> ReportConfig:
    try:
        return load_config(ctx.obj["db"])
    except DomainError as e:
        handle_domain_error(ctx, e)


def _export(ctx, csv_path: str | None, rows: Iterable[Any], columns: Sequence[ColumnSpec]) -> None:
    if csv_path is None:
        return
    rows = list(rows)
    try:
        path = write_csv(csv_path, rows, columns)
    except OSError as e:
        click.echo(f"Error: Could not write CSV file: {e}", err=True)
        ctx.exit(1)
    click.echo(f"\nWrote {len(rows)} rows to {path}")


def _line(label: str, value: str) -> None:
    click.echo(f"{label:<32} {value:>20}")


def _money(config: ReportConfig):
    return lambda amount: format_optional_currency(amount, config.currency, config.locale)


def _header(title: str, date_range) -> None:
    click.echo(f"\n{title}: {date_range.start.isoformat()} to {date_range.end.isoformat()}")
    click.echo("=" * 53)


@click.group()
def report_group():
    """Financial reports."""
    pass


@report_group.command("cogs")
@date_range_options
@csv_option
@retries_option
@click.pass_context
def cogs_report(ctx, start_date, end_date, period_flags, csv_path, retries):
    """Cost of goods sold, by product and category."""
    date_range = resolve_report_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    config = _config(ctx)
    money = _money(config)
    report = load_report(
        ctx, COGSService(ctx.obj["db"], tzinfo=config.timezone).get_report, date_range, retries
    )

    _header("Cost of Goods Sold", date_range)
    _line("Revenue", money(report.total_revenue))
    _line("Cost of goods sold", money(report.total_cogs))
    _line("Gross profit", money(report.gross_profit))
    _line("Gross margin", format_percent(report.gross_margin))
    _line("Units sold", str(report.items_sold))
    _line("Sales", str(report.sales_count))

    if report.cogs_by_product:
        click.echo("\nBy product:")
        for product in sorted(report.cogs_by_product.values(), key=lambda p: -p.cost):
            click.echo(
                f"  {product.name[:28]:<28} {product.quantity:>6} {money(product.cost):>14} "
                f"{money(product.revenue):>14} {format_percent(product.margin):>9}"
            )
    if report.cogs_by_category:
        click.echo("\nBy category:")
        for name, cost in sorted(report.cogs_by_category.items(), key=lambda kv: -kv[1]):
            click.echo(f"  {name[:28]:<28} {money(cost):>14}")

    _export(ctx, csv_path, report.cogs_by_product.values(), COGS_PRODUCT_COLUMNS)


@report_group.command("net-profit")
@date_range_options
@csv_option
@retries_option
@click.pass_context
def net_profit_report(ctx, start_date, end_date, period_flags, csv_path, retries):
    """Net profit after operating expenses, day by day."""
    date_range = resolve_report_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    config = _config(ctx)
    money = _money(config)
    report = load_report(
        ctx, NetProfitService(ctx.obj["db"], tzinfo=config.timezone).get_report, date_range, retries
    )

    _header("Net Profit", date_range)
    _line("Revenue", money(report.total_revenue))
    _line("Cost of goods sold", money(report.total_cogs))
    _line("Gross profit", money(report.gross_profit))
    _line("Gross margin", format_percent(report.gross_margin))
    _line("Operating expenses", money(report.total_operating_expenses))
    _line("Net profit", money(report.net_profit))
    _line("Net margin", format_percent(report.net_margin))

    if report.operating_expenses_by_category:
        click.echo("\nExpenses by category:")
        for name, amount in sorted(report.operating_expenses_by_category.items(), key=lambda kv: -kv[1]):
            click.echo(f"  {name[:28]:<28} {money(amount):>14}")
    if report.daily_data:
        click.echo("\nDaily:")
        for day in report.daily_data:
            click.echo(
                f"  {day.date.isoformat()}  {money(day.revenue):>14} {money(day.operating_expenses):>14} "
                f"{money(day.net_profit):>14}"
            )

    _export(ctx, csv_path, report.daily_data, NET_PROFIT_DAILY_COLUMNS)


@report_group.command("roi")
@date_range_options
@csv_option
@retries_option
@click.pass_context
def roi_report(ctx, start_date, end_date, period_flags, csv_path, retries):
    """Return on the initial investment."""
    date_range = resolve_report_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    config = _config(ctx)
    money = _money(config)
    report = load_report(
        ctx, ROIService(ctx.obj["db"], tzinfo=config.timezone).get_report, date_range, retries
    )

    _header("Return on Investment", date_range)
    _line("Total investment", money(report.total_investment))
    _line("Net profit", money(report.net_profit))
    _line("ROI", format_percent(report.roi))
    _line("Annualized ROI", format_percent(report.annualized_roi))
    _line("Payback period (months)", format_number(report.payback_period, 1))
    _line("Break-even revenue", money(report.break_even_point))
    _line("Profitability index", format_number(report.profitability_index))

    if report.monthly_data:
        click.echo("\nMonthly:")
        for month in report.monthly_data:
            click.echo(
                f"  {month.month}  {money(month.net_profit):>14} {money(month.investment):>14} "
                f"{format_percent(month.roi):>9}"
            )

    _export(ctx, csv_path, report.monthly_data, ROI_MONTHLY_COLUMNS)


def break_even_options(func):
    """Add the break-even period choice and projection date to a command."""
    func = click.option(
        "--as-of", help="Day projections start from (defaults to today)"
    )(func)
    func = click.option(
        "--period",
        type=click.Choice([p.value for p in BreakEvenPeriod if p != BreakEvenPeriod.CUSTOM]),
        default=BreakEvenPeriod.ALL.value,
        show_default=True,
        help="Look-back window; date options select a custom window instead",
    )(func)
    return func


def _break_even_params(ctx, period, as_of, start_date, end_date, period_flags) -> dict[str, Any]:
    try:
        as_of_day = parse_date(as_of) if as_of else date.today()
    except ValueError as e:
        click.echo(f"Error: Invalid as-of date: {e}", err=True)
        ctx.exit(1)

    params: dict[str, Any] = {"period": BreakEvenPeriod(period), "as_of": as_of_day}
    if start_date or end_date or any(period_flags.values()):
        date_range = resolve_report_range(
            ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
        )
        params.update(
            period=BreakEvenPeriod.CUSTOM, start_date=date_range.start, end_date=date_range.end
        )
    return params


@report_group.command("break-even")
@break_even_options
@date_range_options
@csv_option
@retries_option
@click.pass_context
def break_even_report(ctx, period, as_of, start_date, end_date, period_flags, csv_path, retries):
    """Progress toward recovering the initial investment."""
    params = _break_even_params(ctx, period, as_of, start_date, end_date, period_flags)
    config = _config(ctx)
    money = _money(config)
    service = BreakEvenService(ctx.obj["db"], tzinfo=config.timezone)
    metrics = load_report(ctx, lambda p: service.get_metrics(**p), params, retries)

    _header("Break-even", metrics.date_range)
    _line("Total investment", money(metrics.total_investment))
    _line("Cumulative profit", money(metrics.cumulative_profit))
    _line("Progress", format_percent(metrics.break_even_percentage))
    _line("Days to break-even", format_number(metrics.days_to_break_even, 0))
    projected = metrics.projected_break_even_date
    _line("Projected break-even date", projected.isoformat() if projected else "N/A")
    click.echo()
    _line("Fixed costs", money(metrics.fixed_costs))
    _line("Revenue per unit", money(metrics.revenue_per_unit))
    _line("Variable cost per unit", money(metrics.variable_costs_per_unit))
    _line("Contribution margin", money(metrics.contribution_margin))
    _line("Contribution margin ratio", format_number(metrics.contribution_margin_ratio, 4))
    _line("Break-even units", format_number(metrics.break_even_units, 1))
    _line("Break-even sales", money(metrics.break_even_sales))

    _export(ctx, csv_path, [metrics], BREAK_EVEN_COLUMNS)


@report_group.command("scenarios")
@break_even_options
@date_range_options
@csv_option
@retries_option
@click.pass_context
def scenarios_report(ctx, period, as_of, start_date, end_date, period_flags, csv_path, retries):
    """Break-even under what-if cost and revenue scenarios."""
    params = _break_even_params(ctx, period, as_of, start_date, end_date, period_flags)
    config = _config(ctx)
    money = _money(config)
    service = BreakEvenService(ctx.obj["db"], tzinfo=config.timezone)
    results = load_report(ctx, lambda p: service.get_scenarios(**p), params, retries)

    click.echo(f"\n{'Scenario':<16} {'Units':>10} {'Sales':>14} {'Daily profit':>14} {'Days':>8}  Date")
    click.echo("-" * 78)
    for result in results:
        projected = result.break_even_date.isoformat() if result.break_even_date else "N/A"
        click.echo(
            f"{result.scenario.name:<16} {format_number(result.break_even_units, 1):>10} "
            f"{money(result.break_even_sales):>14} {money(result.daily_profit):>14} "
            f"{format_number(result.break_even_days, 0):>8}  {projected}"
        )

    _export(ctx, csv_path, results, SCENARIO_COLUMNS)


@report_group.command("break-even-chart")
@break_even_options
@date_range_options
@csv_option
@retries_option
@click.pass_context
def break_even_chart(ctx, period, as_of, start_date, end_date, period_flags, csv_path, retries):
    """Cumulative profit against cumulative investment, day by day."""
    params = _break_even_params(ctx, period, as_of, start_date, end_date, period_flags)
    config = _config(ctx)
    money = _money(config)
    service = BreakEvenService(ctx.obj["db"], tzinfo=config.timezone)
    points = load_report(ctx, lambda p: service.get_chart_data(**p), params, retries)

    if not points:
        click.echo("No activity in this period.")
    for point in points:
        click.echo(
            f"{point.date.isoformat()}  {money(point.profit):>14} {money(point.cumulative_profit):>14} "
            f"{money(point.break_even_point):>14}"
        )

    _export(ctx, csv_path, points, CHART_COLUMNS)


@report_group.command("stock-value")
@click.option("--as-of", help="Day expiry is judged against (defaults to today)")
@csv_option
@retries_option
@click.pass_context
def stock_value_report(ctx, as_of, csv_path, retries):
    """Inventory value, split into products that sell and products that don't."""
    try:
        as_of_day = parse_date(as_of) if as_of else date.today()
    except ValueError as e:
        click.echo(f"Error: Invalid as-of date: {e}", err=True)
        ctx.exit(1)

    config = _config(ctx)
    money = _money(config)
    summary = load_report(ctx, StockValueService(ctx.obj["db"]).get_summary, as_of_day, retries)

    click.echo("\nStock Value")
    click.echo("=" * 53)
    _line("Retail value", money(summary.total_retail_value))
    _line("Cost value", money(summary.total_cost_value))
    _line("Profit potential", money(summary.total_profit_potential))
    _line("Products / units", f"{summary.total_products} / {summary.total_units}")
    _line("Active inventory", money(summary.active_inventory_value))
    _line("Inactive inventory", money(summary.inactive_inventory_value))
    _line("Low stock", money(summary.low_stock_value))
    _line("Overstock", money(summary.high_stock_value))
    _line("Expired", money(summary.expired_value))
    _line("Expiring within 30 days", money(summary.expiring_soon_value))

    if summary.categories:
        click.echo("\nBy category:")
        for cat in summary.categories:
            click.echo(
                f"  {cat.name[:28]:<28} {cat.product_count:>4} {money(cat.total_value):>14} "
                f"{money(cat.active_total_value):>14}"
            )

    _export(ctx, csv_path, summary.products, STOCK_PRODUCT_COLUMNS)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
