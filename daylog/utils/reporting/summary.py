# daylog/utils/reporting/summary.py
'''
Wires the reporting pipeline together: window -> previous window ->
aggregate both -> insights. `build_period_report` is pure; `load_period_report`
fetches what it needs from the database and config first.
'''

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

import daylog.config.config_manager as cf
from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.db.models import CategoryIndex, HourLog
from daylog.utils.reporting.aggregator import AggregateResult, aggregate
from daylog.utils.reporting.insight_engine import (
    InsightReport,
    InsightThresholds,
    generate_insights,
)
from daylog.utils.reporting.periods import (
    PeriodKind,
    PeriodWindow,
    describe_window,
    period_window,
    previous_period,
)
from daylog.utils.reporting.trends import TrendComparison, compare

logger = logging.getLogger(__name__)


@dataclass
class PeriodReport:
    kind: PeriodKind
    title: str
    window: PeriodWindow
    previous_window: PeriodWindow
    current: AggregateResult
    previous: AggregateResult
    total_change: TrendComparison
    insights: InsightReport

    @property
    def insufficient_data(self) -> bool:
        return self.insights.insufficient_data

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "window": self.window.to_dict(),
            "previous_window": self.previous_window.to_dict(),
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "total_change": self.total_change.to_dict(),
            "insights": self.insights.to_dict(),
        }


def build_period_report(reference: Union[date, datetime], kind: PeriodKind,
                        logs: Iterable[HourLog], index: CategoryIndex,
                        thresholds: Optional[InsightThresholds] = None,
                        headline_group_id: Optional[int] = None) -> PeriodReport:
    """
    Build the report for the period of `kind` containing `reference`.
    `logs` may cover more than both windows; each aggregate filters its own.
    """
    kind = PeriodKind(kind)
    thresholds = thresholds or InsightThresholds.for_kind(kind)
    logs = list(logs)

    window = period_window(reference, kind)
    prev_window = previous_period(window, kind)
    current = aggregate(logs, window, index, headline_group_id)
    previous = aggregate(logs, prev_window, index, headline_group_id)

    return PeriodReport(
        kind=kind,
        title=describe_window(window, kind),
        window=window,
        previous_window=prev_window,
        current=current,
        previous=previous,
        total_change=compare(current.total_hours, previous.total_hours),
        insights=generate_insights(current, previous, index, thresholds),
    )


def load_period_report(reference: Union[date, datetime], kind: PeriodKind) -> PeriodReport:
    """
    Read logs for the current and previous windows, the category index and
    the configured thresholds, then build the report.
    """
    kind = PeriodKind(kind)
    window = period_window(reference, kind)
    prev_window = previous_period(window, kind)
    logs: List[HourLog] = hour_log_repository.get_logs_between(prev_window.start, window.end)
    index = category_repository.load_category_index()

    thresholds = InsightThresholds.for_kind(kind, cf.get_insight_thresholds(kind.value))
    headline_name = cf.get_headline_group_name()
    headline = index.group_by_name(headline_name) if headline_name else None
    if headline_name and headline is None:
        logger.warning(f"Headline group '{headline_name}' not found; headline insights disabled")

    logger.info(f"Building {kind.value} report for {window.start.date()} ({len(logs)} logs)")
    return build_period_report(reference, kind, logs, index, thresholds,
                               headline_group_id=headline.id if headline else None)
