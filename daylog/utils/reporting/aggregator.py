# daylog/utils/reporting/aggregator.py
'''
Daylog Aggregation Module
Reduces a snapshot of hour logs to the totals every report is built from.
Each log is exactly one hour. Nothing here touches the database: callers pass
in the logs and a CategoryIndex, and get back plain data.
'''

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from daylog.utils.db.models import CategoryIndex, HourLog
from daylog.utils.reporting.periods import PeriodWindow, weekday_number
from daylog.utils.reporting.trends import round_half_up

logger = logging.getLogger(__name__)

HOURS = range(24)
WEEKDAYS = range(1, 8)


@dataclass
class AggregateResult:
    window: PeriodWindow
    total_hours: int = 0
    categorized_hours: int = 0
    unlogged_hours: int = 0
    hours_by_category: Dict[int, int] = field(default_factory=dict)
    hours_by_group: Dict[int, int] = field(default_factory=dict)
    hours_by_weekday: Dict[int, int] = field(default_factory=dict)
    hours_by_hour_of_day: Dict[int, Optional[float]] = field(default_factory=dict)
    logs_by_hour_of_day: Dict[int, int] = field(default_factory=dict)
    average_rating: Optional[float] = None
    rated_count: int = 0
    headline_group_id: Optional[int] = None
    headline_hours: int = 0
    headline_by_weekday: Dict[int, int] = field(default_factory=dict)
    headline_by_hour_of_day: Dict[int, int] = field(default_factory=dict)
    weekday_occurrences: Dict[int, int] = field(default_factory=dict)

    @property
    def slot_hours(self) -> int:
        return len(self.window) * 24

    @property
    def open_hours(self) -> int:
        return max(self.slot_hours - self.total_hours, 0)

    @property
    def is_empty(self) -> bool:
        return self.total_hours == 0

    def share_of_total(self, hours: int) -> int:
        """Integer percentage of total_hours; 0 when nothing is logged."""
        if self.total_hours <= 0:
            return 0
        return round_half_up(hours / self.total_hours * 100)

    def to_dict(self) -> dict:
        return {
            "window": self.window.to_dict(),
            "total_hours": self.total_hours,
            "categorized_hours": self.categorized_hours,
            "unlogged_hours": self.unlogged_hours,
            "open_hours": self.open_hours,
            "hours_by_category": dict(self.hours_by_category),
            "hours_by_group": dict(self.hours_by_group),
            "hours_by_weekday": dict(self.hours_by_weekday),
            "hours_by_hour_of_day": dict(self.hours_by_hour_of_day),
            "logs_by_hour_of_day": dict(self.logs_by_hour_of_day),
            "average_rating": self.average_rating,
            "rated_count": self.rated_count,
            "headline_group_id": self.headline_group_id,
            "headline_hours": self.headline_hours,
            "headline_by_weekday": dict(self.headline_by_weekday),
            "headline_by_hour_of_day": dict(self.headline_by_hour_of_day),
            "weekday_occurrences": dict(self.weekday_occurrences),
        }


def filter_window(logs: Iterable[HourLog], window: PeriodWindow) -> List[HourLog]:
    return [log for log in logs if log.day is not None and window.contains(log.day)]


def _ranked(counts: Dict[int, int], sort_key) -> Dict[int, int]:
    # count desc, then declared sort order, then id
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1],) + sort_key(kv[0]))
    return dict(ordered)


def aggregate(logs: Iterable[HourLog], window: PeriodWindow,
              index: Optional[CategoryIndex] = None,
              headline_group_id: Optional[int] = None) -> AggregateResult:
    """
    Group the logs falling inside `window` by category, group, weekday and
    hour of day. Logs without a category count toward total_hours only.
    """
    index = index or CategoryIndex()
    in_window = filter_window(logs, window)

    by_category: Dict[int, int] = defaultdict(int)
    by_group: Dict[int, int] = defaultdict(int)
    by_weekday = {d: 0 for d in WEEKDAYS}
    logs_by_hour = {h: 0 for h in HOURS}
    rating_sums: Dict[int, float] = defaultdict(float)
    rating_counts: Dict[int, int] = defaultdict(int)
    headline_by_weekday = {d: 0 for d in WEEKDAYS}
    headline_by_hour = {h: 0 for h in HOURS}
    headline_hours = 0
    categorized = 0
    rating_total = 0.0
    rated = 0

    for log in in_window:
        weekday = weekday_number(log.day)
        by_weekday[weekday] += 1
        if 0 <= log.hour <= 23:
            logs_by_hour[log.hour] += 1

        if log.rating is not None:
            rating_total += log.rating
            rated += 1
            rating_sums[log.hour] += log.rating
            rating_counts[log.hour] += 1

        if log.category_id is None:
            continue
        categorized += 1
        by_category[log.category_id] += 1

        group = index.group_for_category(log.category_id)
        if group is None:
            continue
        by_group[group.id] += 1
        if headline_group_id is not None and group.id == headline_group_id:
            headline_hours += 1
            headline_by_weekday[weekday] += 1
            if 0 <= log.hour <= 23:
                headline_by_hour[log.hour] += 1

    hour_averages: Dict[int, Optional[float]] = {}
    for h in HOURS:
        count = rating_counts.get(h, 0)
        hour_averages[h] = rating_sums[h] / count if count else None

    occurrences = {d: 0 for d in WEEKDAYS}
    for day in window.days():
        occurrences[weekday_number(day)] += 1

    def category_key(category_id):
        cat = index.category(category_id)
        return (cat.sort_order if cat else 0, category_id)

    def group_key(group_id):
        grp = index.group(group_id)
        return (grp.sort_order if grp else 0, group_id)

    result = AggregateResult(
        window=window,
        total_hours=len(in_window),
        categorized_hours=categorized,
        unlogged_hours=len(in_window) - categorized,
        hours_by_category=_ranked(by_category, category_key),
        hours_by_group=_ranked(by_group, group_key),
        hours_by_weekday=by_weekday,
        hours_by_hour_of_day=hour_averages,
        logs_by_hour_of_day=logs_by_hour,
        average_rating=rating_total / rated if rated else None,
        rated_count=rated,
        headline_group_id=headline_group_id,
        headline_hours=headline_hours,
        headline_by_weekday=headline_by_weekday,
        headline_by_hour_of_day=headline_by_hour,
        weekday_occurrences=occurrences,
    )
    logger.debug("Aggregated %d logs in %s..%s", result.total_hours,
                 window.start.date(), window.end.date())
    return result
