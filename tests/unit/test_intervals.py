# tests/unit/test_intervals.py
"""Unit tests for calendar interval parsing and day arithmetic."""

from datetime import datetime

import pytest


class TestParseInterval:
    """Tests for parse_interval()."""

    def test_days(self):
        from formstore.services.intervals import parse_interval

        interval = parse_interval("P30D")

        assert interval.days == 30
        assert interval.months == 0

    def test_weeks(self):
        from formstore.services.intervals import parse_interval

        assert parse_interval("P2W").days == 14

    def test_calendar_units(self):
        from formstore.services.intervals import parse_interval

        interval = parse_interval("P1Y2M3D")

        assert (interval.years, interval.months, interval.days) == (1, 2, 3)

    @pytest.mark.parametrize("expression", ["", "   ", None])
    def test_rejects_empty(self, expression):
        from formstore.services.intervals import InvalidIntervalError, parse_interval

        with pytest.raises(InvalidIntervalError):
            parse_interval(expression)

    @pytest.mark.parametrize("expression", ["30", "thirty days", "P", "PXD"])
    def test_rejects_malformed(self, expression):
        from formstore.services.intervals import InvalidIntervalError, parse_interval

        with pytest.raises(InvalidIntervalError):
            parse_interval(expression)

    def test_rejects_fractional_months(self):
        from formstore.services.intervals import InvalidIntervalError, parse_interval

        with pytest.raises(InvalidIntervalError):
            parse_interval("P1.5M")

    def test_invalid_interval_is_value_error(self):
        from formstore.services.intervals import InvalidIntervalError

        assert issubclass(InvalidIntervalError, ValueError)


class TestDaysToKeep:
    """Tests for days_to_keep()."""

    def test_plain_days(self):
        from formstore.services.intervals import days_to_keep, parse_interval

        assert days_to_keep(parse_interval("P30D"), datetime(2024, 6, 15)) == 30

    def test_month_depends_on_reference_date(self):
        """One month from Jan 31 ends on Feb 29 (2024), from Apr 30 on May 30."""
        from formstore.services.intervals import days_to_keep, parse_interval

        interval = parse_interval("P1M")

        assert days_to_keep(interval, datetime(2024, 1, 31)) == 29
        assert days_to_keep(interval, datetime(2023, 1, 31)) == 28
        assert days_to_keep(interval, datetime(2024, 4, 30)) == 30

    def test_year_covers_leap_day(self):
        from formstore.services.intervals import days_to_keep, parse_interval

        assert days_to_keep(parse_interval("P1Y"), datetime(2024, 1, 1)) == 366
        assert days_to_keep(parse_interval("P1Y"), datetime(2025, 1, 1)) == 365

    def test_partial_days_truncate(self):
        from formstore.services.intervals import days_to_keep, parse_interval

        assert days_to_keep(parse_interval("P1DT23H"), datetime(2024, 6, 15)) == 1
        assert days_to_keep(parse_interval("PT12H"), datetime(2024, 6, 15)) == 0


class TestCutoffFor:
    """Tests for cutoff_for()."""

    def test_cutoff_is_whole_days_before_now(self):
        from formstore.services.intervals import cutoff_for, parse_interval

        now = datetime(2024, 3, 10, 12, 0)

        assert cutoff_for(parse_interval("P1DT6H"), now) == datetime(2024, 3, 9, 12, 0)
