# formstore/services/intervals.py
"""
Calendar intervals for retention rules.

Rules are written as ISO 8601 durations (P30D, P1Y2M3D, P2W). Years and
months are calendar units, so the same interval covers a different number of
days depending on the reference date. Parsing is done by isodate; the result
is converted to a dateutil relativedelta for the date arithmetic.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import isodate
from dateutil.relativedelta import relativedelta

from formstore.models import utcnow


class InvalidIntervalError(ValueError):
    """Raised when an interval expression is empty or not a valid ISO 8601 duration."""


def _whole(value, unit: str, expression: str) -> int:
    number = Decimal(str(value))
    if number != number.to_integral_value():
        raise InvalidIntervalError(f"Interval '{expression}': fractional {unit} are not supported")
    return int(number)


def parse_interval(expression: str | None) -> relativedelta:
    """
    Parse an ISO 8601 duration into a calendar-aware relativedelta.

    Raises InvalidIntervalError for empty, malformed or negative expressions.
    """
    if expression is None or not str(expression).strip():
        raise InvalidIntervalError("Interval must not be empty")

    expression = str(expression).strip()
    try:
        parsed = isodate.parse_duration(expression)
    except (isodate.ISO8601Error, ValueError) as e:
        raise InvalidIntervalError(f"Invalid interval '{expression}': {e}") from e

    if isinstance(parsed, timedelta):
        years, months, tdelta = 0, 0, parsed
    else:
        years = _whole(parsed.years, "years", expression)
        months = _whole(parsed.months, "months", expression)
        tdelta = parsed.tdelta

    if years < 0 or months < 0 or tdelta < timedelta(0):
        raise InvalidIntervalError(f"Invalid interval '{expression}': negative durations are not supported")

    return relativedelta(
        years=years,
        months=months,
        days=tdelta.days,
        seconds=tdelta.seconds,
        microseconds=tdelta.microseconds,
    )


def days_to_keep(interval: relativedelta, now: datetime | None = None) -> int:
    """
    Whole days covered by the interval when added to `now`.

    The interval is added to now and the difference back to now is taken,
    truncating partial days. Month and year lengths therefore depend on now:
    P1M from Jan 31 is 28 or 29 days (clamped to the end of February), from
    Apr 30 it is 30 days.
    """
    now = now or utcnow()
    return ((now + interval) - now).days


def cutoff_for(interval: relativedelta, now: datetime | None = None) -> datetime:
    """Creation time at or before which an entry is old enough to be removed."""
    now = now or utcnow()
    return now - timedelta(days=days_to_keep(interval, now))
