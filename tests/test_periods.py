# tests/test_periods.py

from datetime import date, datetime

import pytest

from daylog.utils.reporting.periods import (
    PeriodKind,
    PeriodWindow,
    describe_window,
    period_window,
    previous_period,
    shift_window,
    start_of_week,
    weekday_name,
    weekday_number,
)


def test_weekday_number_is_sunday_first():
    # 2024-03-03 is a Sunday
    assert weekday_number(date(2024, 3, 3)) == 1
    assert weekday_number(date(2024, 3, 4)) == 2
    assert weekday_number(date(2024, 3, 9)) == 7
    assert weekday_name(1) == "Sun"
    assert weekday_name(7) == "Sat"
    assert weekday_name(6, full=True) == "Friday"


def test_day_window_is_midnight_to_midnight():
    window = period_window(datetime(2024, 3, 5, 15, 30), PeriodKind.DAY)
    assert window.start == datetime(2024, 3, 5)
    assert window.end == datetime(2024, 3, 6)
    assert len(window) == 1


def test_week_window_starts_on_sunday():
    window = period_window(date(2024, 3, 5), PeriodKind.WEEK)
    assert window.start == datetime(2024, 3, 3)
    assert window.end == datetime(2024, 3, 10)
    assert len(window.days()) == 7


def test_week_window_on_a_sunday_starts_that_day():
    assert start_of_week(date(2024, 3, 3)) == datetime(2024, 3, 3)


def test_month_window_covers_calendar_month():
    window = period_window(date(2024, 2, 14), "month")
    assert window.start == datetime(2024, 2, 1)
    assert window.end == datetime(2024, 3, 1)
    assert len(window) == 29


def test_window_contains_is_end_exclusive():
    window = period_window(date(2024, 3, 15), PeriodKind.MONTH)
    assert window.contains(date(2024, 3, 1))
    assert window.contains(date(2024, 3, 31))
    assert not window.contains(date(2024, 4, 1))
    assert not window.contains(date(2024, 2, 29))


@pytest.mark.parametrize("kind, expected_start", [
    (PeriodKind.DAY, datetime(2024, 3, 4)),
    (PeriodKind.WEEK, datetime(2024, 2, 25)),
    (PeriodKind.MONTH, datetime(2024, 2, 1)),
])
def test_previous_period_ends_where_current_starts(kind, expected_start):
    window = period_window(date(2024, 3, 5), kind)
    prev = previous_period(window, kind)
    assert prev.end == window.start
    assert prev.start == expected_start


def test_previous_month_of_march_31_window_in_leap_year():
    window = PeriodWindow(datetime(2024, 3, 31), datetime(2024, 4, 30))
    prev = previous_period(window, PeriodKind.MONTH)
    assert prev.start == datetime(2024, 2, 29)
    assert prev.end == datetime(2024, 3, 31)


def test_previous_month_of_march_31_window_in_common_year():
    window = PeriodWindow(datetime(2023, 3, 31), datetime(2023, 4, 30))
    prev = previous_period(window, PeriodKind.MONTH)
    assert prev.start == datetime(2023, 2, 28)


@pytest.mark.parametrize("year, days", [(2024, 29), (2023, 28)])
def test_previous_month_of_march_is_february(year, days):
    window = period_window(date(year, 3, 31), PeriodKind.MONTH)
    prev = previous_period(window, PeriodKind.MONTH)
    assert prev.start == datetime(year, 2, 1)
    assert len(prev) == days


def test_previous_month_across_year_boundary():
    window = period_window(date(2024, 1, 10), PeriodKind.MONTH)
    prev = previous_period(window, PeriodKind.MONTH)
    assert prev.start == datetime(2023, 12, 1)
    assert prev.end == datetime(2024, 1, 1)


def test_shift_window_moves_whole_periods():
    week = period_window(date(2024, 3, 5), PeriodKind.WEEK)
    assert shift_window(week, PeriodKind.WEEK, -1).start == datetime(2024, 2, 25)
    month = period_window(date(2024, 1, 31), PeriodKind.MONTH)
    assert shift_window(month, PeriodKind.MONTH, 1).start == datetime(2024, 2, 1)


def test_describe_window():
    assert describe_window(period_window(date(2024, 3, 5), "day"), "day") == "Tuesday, Mar 5 2024"
    assert describe_window(period_window(date(2024, 3, 5), "week"), "week") == "Mar 3 - Mar 9"
    assert describe_window(period_window(date(2024, 3, 5), "month"), "month") == "March 2024"
