# daylog/utils/reporting/periods.py
'''
Daylog Period Module
Calendar windows used by every report: a day, a Sunday-first week, or a calendar month.
A window is a pair of naive local-midnight datetimes, start inclusive and end exclusive.
'''

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import List, Union

from dateutil.relativedelta import relativedelta

DayLike = Union[date, datetime]

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
FULL_WEEKDAY_NAMES = [
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
]


class PeriodKind(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class PeriodWindow:
    start: datetime
    end: datetime

    def contains(self, day: DayLike) -> bool:
        return self.start <= start_of_day(day) < self.end

    def days(self) -> List[date]:
        current = self.start.date()
        last = self.end.date()
        out = []
        while current < last:
            out.append(current)
            current += timedelta(days=1)
        return out

    def __len__(self) -> int:
        return (self.end.date() - self.start.date()).days

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def start_of_day(value: DayLike) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def weekday_number(value: DayLike) -> int:
    """1 = Sunday ... 7 = Saturday."""
    return (value.weekday() + 1) % 7 + 1


def weekday_name(number: int, full: bool = False) -> str:
    return (FULL_WEEKDAY_NAMES if full else WEEKDAY_NAMES)[number - 1]


def start_of_week(value: DayLike) -> datetime:
    midnight = start_of_day(value)
    return midnight - timedelta(days=weekday_number(midnight) - 1)


def start_of_month(value: DayLike) -> datetime:
    return start_of_day(value).replace(day=1)


def period_window(reference: DayLike, kind: PeriodKind) -> PeriodWindow:
    kind = PeriodKind(kind)
    if kind is PeriodKind.DAY:
        start = start_of_day(reference)
        return PeriodWindow(start, start + timedelta(days=1))
    if kind is PeriodKind.WEEK:
        start = start_of_week(reference)
        return PeriodWindow(start, start + timedelta(days=7))
    start = start_of_month(reference)
    return PeriodWindow(start, start + relativedelta(months=1))


def previous_period(window: PeriodWindow, kind: PeriodKind) -> PeriodWindow:
    """
    The window of the same kind ending where `window` starts.
    relativedelta clamps to the end of shorter months (Mar 31 - 1 month = Feb 28/29).
    """
    kind = PeriodKind(kind)
    if kind is PeriodKind.DAY:
        return PeriodWindow(window.start - timedelta(days=1), window.start)
    if kind is PeriodKind.WEEK:
        return PeriodWindow(window.start - timedelta(days=7), window.start)
    return PeriodWindow(window.start - relativedelta(months=1), window.start)


def shift_window(window: PeriodWindow, kind: PeriodKind, steps: int) -> PeriodWindow:
    """Move a window forwards (steps > 0) or backwards by whole periods."""
    kind = PeriodKind(kind)
    if kind is PeriodKind.DAY:
        delta = relativedelta(days=steps)
    elif kind is PeriodKind.WEEK:
        delta = relativedelta(weeks=steps)
    else:
        delta = relativedelta(months=steps)
    return period_window(window.start + delta, kind)


def describe_window(window: PeriodWindow, kind: PeriodKind) -> str:
    kind = PeriodKind(kind)
    if kind is PeriodKind.DAY:
        return f"{window.start.strftime('%A, %b')} {window.start.day} {window.start.year}"
    if kind is PeriodKind.WEEK:
        last = window.end - timedelta(days=1)
        return f"{window.start.strftime('%b')} {window.start.day} - {last.strftime('%b')} {last.day}"
    return window.start.strftime("%B %Y")
