"""
Tests for sbm_recurrence.domain.calendar.

Validates calendar-day normalization and the day/month/weekday arithmetic
the rule evaluator is built on.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from sbm_kernel.exceptions import InvalidTargetDateError
from sbm_recurrence.domain.calendar import (
    day_of_month,
    days_between,
    iso_weekday,
    months_between,
    to_calendar_day,
)


# =============================================================================
# to_calendar_day
# =============================================================================


class TestToCalendarDay:
    def test_date_passes_through(self):
        assert to_calendar_day(date(2024, 1, 3)) == date(2024, 1, 3)

    def test_naive_datetime_drops_time(self):
        assert to_calendar_day(datetime(2024, 1, 3, 23, 59)) == date(2024, 1, 3)

    def test_aware_datetime_converted_to_zone_first(self):
        utc_early = datetime(2024, 1, 4, 2, 0, tzinfo=timezone.utc)
        eastern = timezone(timedelta(hours=-5))
        assert to_calendar_day(utc_early, eastern) == date(2024, 1, 3)

    def test_aware_datetime_without_zone_keeps_own_day(self):
        utc_early = datetime(2024, 1, 4, 2, 0, tzinfo=timezone.utc)
        assert to_calendar_day(utc_early) == date(2024, 1, 4)

    def test_iso_date_string(self):
        assert to_calendar_day("2024-01-03") == date(2024, 1, 3)

    def test_iso_datetime_string(self):
        assert to_calendar_day("2024-01-03T10:15:00") == date(2024, 1, 3)

    @pytest.mark.parametrize("value", [None, "", "not-a-date", "2024-02-30", 20240103, 3.5, object()])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(InvalidTargetDateError) as exc_info:
            to_calendar_day(value)
        assert exc_info.value.code == "INVALID_TARGET_DATE"


# =============================================================================
# Arithmetic
# =============================================================================


class TestDaysBetween:
    def test_same_day_is_zero(self):
        assert days_between(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_across_leap_day(self):
        assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2

    def test_negative_when_end_is_earlier(self):
        assert days_between(date(2024, 1, 10), date(2024, 1, 3)) == -7


class TestMonthsBetween:
    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 15), date(2024, 1, 31), 0),
            (date(2024, 1, 15), date(2024, 2, 14), 0),
            (date(2024, 1, 15), date(2024, 2, 15), 1),
            (date(2024, 1, 15), date(2024, 3, 15), 2),
            (date(2023, 12, 10), date(2024, 2, 10), 2),
            (date(2024, 1, 20), date(2024, 2, 5), 0),
            (date(2024, 1, 20), date(2024, 4, 5), 2),
            (date(2024, 1, 31), date(2024, 2, 29), 0),
            (date(2024, 1, 1), date(2025, 1, 1), 12),
        ],
    )
    def test_whole_completed_months(self, start, end, expected):
        assert months_between(start, end) == expected


class TestWeekdayAndDay:
    def test_monday_is_one(self):
        assert iso_weekday(date(2024, 1, 1)) == 1

    def test_wednesday_is_three(self):
        assert iso_weekday(date(2024, 1, 3)) == 3

    def test_sunday_is_seven(self):
        assert iso_weekday(date(2024, 1, 7)) == 7

    def test_day_of_month(self):
        assert day_of_month(date(2024, 2, 29)) == 29
