"""CLI helpers for date range resolution."""

from datetime import date
from functools import wraps

import click

from retailmetrics.domain.entities import DateRange
from retailmetrics.domain.errors import ValidationError
from retailmetrics.utils.date_parser import REPORT_PERIODS, get_date_range, parse_date

PERIOD_FLAGS_HELP = ", ".join(f"--{period}" for period in REPORT_PERIODS)


def date_range_options(func):
    """Add --start-date/--end-date and the period flags to a command.

    The wrapped command receives ``start_date``, ``end_date`` and a
    ``period_flags`` dict keyed by period name.
    """

    @click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
    @click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
    @click.option("--this-month", is_flag=True, help="Filter to current month")
    @click.option("--last-month", is_flag=True, help="Filter to previous month")
    @click.option("--this-year", is_flag=True, help="Filter to current year")
    @click.option("--last-year", is_flag=True, help="Filter to previous year")
    @click.option("--this-week", is_flag=True, help="Filter to current week")
    @click.option("--last-week", is_flag=True, help="Filter to previous week")
    @wraps(func)
    def wrapper(*args, **kwargs):
        kwargs["period_flags"] = {
            period: kwargs.pop(period.replace("-", "_")) for period in REPORT_PERIODS
        }
        return func(*args, **kwargs)

    return wrapper


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            f"Error: Only one period option ({PERIOD_FLAGS_HELP}) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    start = None
    end = None

    if period_count == 1:
        period = next(p for p, is_set in period_flags.items() if is_set)
        start, end = get_date_range(period)
    else:
        if start_date:
            try:
                start = parse_date(start_date)
            except ValueError as e:
                click.echo(f"Error: Invalid start date: {e}", err=True)
                ctx.exit(1)

        if end_date:
            try:
                end = parse_date(end_date)
            except ValueError as e:
                click.echo(f"Error: Invalid end date: {e}", err=True)
                ctx.exit(1)

        if start is None and end is None and default_range is not None:
            start, end = default_range

    return start, end


def resolve_report_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
) -> DateRange:
    """Resolve the inclusive range of a report, defaulting to this month.

    A missing end date means today; a missing start date means the first
    day of the end date's month.
    """
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags,
        default_range=get_date_range("this-month"),
    )
    end = end or date.today()
    start = start or end.replace(day=1)
    try:
        return DateRange(start, end)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
