"""Shared arithmetic and calendar helpers for the metrics aggregators."""

from datetime import datetime, date, time, tzinfo as TZInfo
from decimal import Decimal, ROUND_CEILING
from typing import Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta

from retailmetrics.domain.entities import DateRange, ZERO, HUNDRED


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part`` as a percentage of ``whole``, or 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Return numerator / denominator, or 0 when the denominator is 0."""
    if denominator == 0:
        return ZERO
    return numerator / denominator


def positive_ratio(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    """Return numerator / denominator, or None unless the denominator is positive."""
    if denominator <= 0:
        return None
    return numerator / denominator


def whole_days(days: Decimal) -> int:
    """Round a fractional day count up to whole days."""
    return int(days.to_integral_value(rounding=ROUND_CEILING))


def local_date(moment: datetime, tzinfo: Optional[TZInfo] = None) -> date:
    """Return the calendar date of ``moment`` in the given timezone.

    Naive datetimes are stored as UTC, so they are interpreted as UTC before
    conversion. Without a timezone the local system zone is used.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz.UTC)
    return moment.astimezone(tzinfo or tz.tzlocal()).date()


def utc_bound(day: date, tzinfo: Optional[TZInfo] = None) -> datetime:
    """Return local midnight of ``day`` as a naive UTC datetime."""
    local = datetime.combine(day, time.min).replace(tzinfo=tzinfo or tz.tzlocal())
    return local.astimezone(tz.UTC).replace(tzinfo=None)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def month_ranges(date_range: DateRange) -> list[DateRange]:
    """Split a range into calendar months, clipping the first and last month."""
    months: list[DateRange] = []
    month_start = date_range.start.replace(day=1)
    while month_start <= date_range.end:
        next_month = month_start + relativedelta(months=1)
        start = max(month_start, date_range.start)
        end = min(next_month - relativedelta(days=1), date_range.end)
        months.append(DateRange(start, end))
        month_start = next_month
    return months
