# daylog/utils/reporting/insight_engine.py
'''
Daylog Insight Engine
Turns a period's aggregates (and the previous period's) into at most
MAX_INSIGHTS short observations. Rules run in a fixed priority order and the
first ones that fire win; lower rules such as the dominant share are almost
always eligible, so their position at the end of the table matters.
'''

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from daylog.utils.core_utils import format_hour
from daylog.utils.db.models import CategoryIndex
from daylog.utils.reporting.aggregator import AggregateResult
from daylog.utils.reporting.periods import PeriodKind, weekday_name
from daylog.utils.reporting.trends import TrendComparison, compare

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 4

MORNING_HOURS = range(6, 12)
AFTERNOON_HOURS = range(12, 18)
WEEKEND_DAYS = (1, 7)
WEEKDAY_DAYS = (2, 3, 4, 5, 6)

DEFAULT_COLOR = "gray"

# Gates compared against hours or ratings; false or "off" in config disables the rule.
NUMERIC_GATES = (
    "peak_rating_floor",
    "low_rating_ceiling",
    "headline_delta",
    "bucket_delta",
    "split_margin",
    "rating_delta",
)
OFF_VALUES = ("off", "none", "")

# Built-in thresholds per period kind; [insights.<kind>] in config overrides them.
DEFAULT_THRESHOLDS: Dict[str, Dict[str, Any]] = {
    "day": {
        "period_label": "day",
        "headline_delta": 2,
        "bucket_delta": 2,
        "best_day_mode": "total",
        "split": "morning_afternoon",
        "split_margin": 2,
    },
    "week": {
        "period_label": "week",
        "headline_delta": 3,
        "bucket_delta": 5,
        "best_day_mode": "total",
        "split": "morning_afternoon",
        "split_margin": 3,
    },
    "month": {
        "period_label": "month",
        "headline_delta": 10,
        "bucket_delta": 15,
        "best_day_mode": "average",
        "split": "weekday_weekend",
        "split_margin": 1,
    },
}


@dataclass(frozen=True)
class Insight:
    rule: str
    icon: str
    color: str
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InsightReport:
    insights: List[Insight] = field(default_factory=list)
    insufficient_data: bool = False

    def to_dict(self) -> dict:
        return {
            "insights": [i.to_dict() for i in self.insights],
            "insufficient_data": self.insufficient_data,
        }


@dataclass(frozen=True)
class InsightThresholds:
    """
    Numeric gates for each rule. A gate set to None switches its rule off;
    in config that is written as `false` or `"off"`, since TOML has no null.
    """
    period_label: str = "week"
    peak_rating_floor: Optional[float] = 7.0
    low_rating_ceiling: Optional[float] = 5.0
    headline_delta: Optional[int] = 3
    bucket_delta: Optional[int] = 5
    bucket_level: str = "category"
    best_day_mode: str = "total"
    split: Optional[str] = "morning_afternoon"
    split_margin: Optional[float] = 3
    rating_delta: Optional[float] = 0.5
    headline_label: Optional[str] = None

    @classmethod
    def for_kind(cls, kind: PeriodKind,
                 overrides: Optional[Mapping[str, Any]] = None) -> "InsightThresholds":
        """
        Thresholds for a period kind: built-in defaults, then `overrides`
        (usually the [insights.<kind>] config section). Unknown keys are ignored.
        """
        kind = PeriodKind(kind)
        values = dict(DEFAULT_THRESHOLDS[kind.value])
        fallbacks = {f.name: f.default for f in fields(cls)}
        fallbacks.update(values)
        known = set(fallbacks)
        for key, value in (overrides or {}).items():
            if key in known:
                values[key] = value
            else:
                logger.debug(f"Ignoring unknown insight threshold '{key}'")
        for key in NUMERIC_GATES:
            if key in values:
                values[key] = _gate_value(key, values[key], fallbacks[key])
        values.setdefault("bucket_level", "category")
        if values["bucket_level"] not in ("category", "group"):
            logger.warning(
                f"Invalid bucket_level '{values['bucket_level']}', using 'category'")
            values["bucket_level"] = "category"
        if values.get("best_day_mode") not in ("total", "average"):
            values["best_day_mode"] = "total"
        if values.get("split") is False or (
                isinstance(values.get("split"), str) and values["split"].strip().lower() in OFF_VALUES):
            values["split"] = None
        if values.get("split") not in (None, "morning_afternoon", "weekday_weekend"):
            logger.warning(f"Invalid split '{values.get('split')}', disabling split insight")
            values["split"] = None
        return cls(**values)


def _gate_value(key: str, value: Any, fallback: Any) -> Any:
    if value is None or value is False:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in OFF_VALUES:
            return None
        try:
            return float(text)
        except ValueError:
            pass
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    logger.warning(f"Invalid value {value!r} for insight threshold '{key}', using {fallback}")
    return fallback


# A rule check returns (template key, values) when it fires, else None.
CheckResult = Optional[Tuple[str, Dict[str, Any]]]


@dataclass(frozen=True)
class InsightRule:
    name: str
    threshold_field: Optional[str]
    check: Callable[["RuleContext"], CheckResult]
    # template key -> (icon, color, text); color and text are str.format templates
    templates: Dict[str, Tuple[str, str, str]]
    needs_headline: bool = False

    def evaluate(self, ctx: "RuleContext") -> Optional[Insight]:
        if self.needs_headline and not ctx.has_headline:
            return None
        if self.threshold_field and getattr(ctx.thresholds, self.threshold_field) is None:
            return None
        outcome = self.check(ctx)
        if outcome is None:
            return None
        key, values = outcome
        icon, color, text = self.templates[key]
        return Insight(
            rule=self.name,
            icon=icon,
            color=color.format(**values),
            text=text.format(**values),
        )


@dataclass
class RuleContext:
    current: AggregateResult
    previous: AggregateResult
    index: CategoryIndex
    thresholds: InsightThresholds
    comparator: Callable[[Any, Any], TrendComparison] = compare

    @property
    def has_headline(self) -> bool:
        return self.current.headline_group_id is not None

    @property
    def period(self) -> str:
        return self.thresholds.period_label

    @property
    def headline_label(self) -> str:
        if self.thresholds.headline_label:
            return self.thresholds.headline_label
        group = self.index.group(self.current.headline_group_id)
        return group.name if group else "Headline"


# ---------- Shared Helpers ----------


def _fmt1(value: float) -> str:
    return f"{value:.1f}"


def _rated_hours(result: AggregateResult) -> List[Tuple[int, float]]:
    return [(h, avg) for h, avg in sorted(result.hours_by_hour_of_day.items())
            if avg is not None]


def _bucket_name_color(ctx: RuleContext, bucket_id: int) -> Tuple[str, str]:
    if ctx.thresholds.bucket_level == "group":
        group = ctx.index.group(bucket_id)
        return (group.name, group.color_hex) if group else (f"Group {bucket_id}", DEFAULT_COLOR)
    category = ctx.index.category(bucket_id)
    if category is None:
        return f"Category {bucket_id}", DEFAULT_COLOR
    group = ctx.index.group(category.group_id)
    return category.name, group.color_hex if group else DEFAULT_COLOR


def _buckets(result: AggregateResult, level: str) -> Dict[int, int]:
    return result.hours_by_group if level == "group" else result.hours_by_category


def _change_values(change: TrendComparison, **extra) -> Dict[str, Any]:
    values = {
        "delta": change.delta,
        "abs_delta": abs(change.delta),
        "percent": change.percent_delta,
    }
    values.update(extra)
    return values


# ---------- Rule Checks ----------


def check_peak_hour(ctx: RuleContext) -> CheckResult:
    rated = _rated_hours(ctx.current)
    if not rated:
        return None
    best_hour, best_avg = rated[0]
    for hour, avg in rated[1:]:
        if avg > best_avg:
            best_hour, best_avg = hour, avg
    if best_avg < ctx.thresholds.peak_rating_floor:
        return None
    return "default", {"hour": format_hour(best_hour), "avg": _fmt1(best_avg)}


def check_low_hour(ctx: RuleContext) -> CheckResult:
    rated = _rated_hours(ctx.current)
    if not rated:
        return None
    worst_hour, worst_avg = rated[0]
    for hour, avg in rated[1:]:
        if avg < worst_avg:
            worst_hour, worst_avg = hour, avg
    if worst_avg >= ctx.thresholds.low_rating_ceiling:
        return None
    return "default", {"hour": format_hour(worst_hour), "avg": _fmt1(worst_avg)}


def check_headline_change(ctx: RuleContext) -> CheckResult:
    change = ctx.comparator(ctx.current.headline_hours, ctx.previous.headline_hours)
    if not change.has_prior_data:
        return None
    values = _change_values(change, name=ctx.headline_label, period=ctx.period)
    if change.delta >= ctx.thresholds.headline_delta:
        return "up", values
    if change.delta <= -ctx.thresholds.headline_delta:
        return "down", values
    return None


def check_bucket_change(ctx: RuleContext) -> CheckResult:
    level = ctx.thresholds.bucket_level
    previous = _buckets(ctx.previous, level)
    # current buckets are already ordered by hours desc, then sort order
    for bucket_id, hours in _buckets(ctx.current, level).items():
        change = ctx.comparator(hours, previous.get(bucket_id, 0))
        if not change.has_prior_data or abs(change.delta) < ctx.thresholds.bucket_delta:
            continue
        name, color = _bucket_name_color(ctx, bucket_id)
        values = _change_values(change, name=name, color=color, period=ctx.period)
        return ("up" if change.delta > 0 else "down"), values
    return None


def check_best_day(ctx: RuleContext) -> CheckResult:
    current = ctx.current
    best_day, best_value = None, 0.0
    for day in range(1, 8):
        hours = current.headline_by_weekday.get(day, 0)
        if ctx.thresholds.best_day_mode == "average":
            occurrences = current.weekday_occurrences.get(day, 0)
            value = hours / occurrences if occurrences else 0.0
        else:
            value = hours
        if value > best_value:
            best_day, best_value = day, value
    if best_day is None:
        return None
    average = ctx.thresholds.best_day_mode == "average"
    values = {"day": weekday_name(best_day, full=average), "name": ctx.headline_label}
    if average:
        values["avg"] = _fmt1(best_value)
        return "average", values
    values["hours"] = int(best_value)
    return "total", values


def check_split(ctx: RuleContext) -> CheckResult:
    current = ctx.current
    margin = ctx.thresholds.split_margin
    if margin is None:
        return None
    name = ctx.headline_label
    if ctx.thresholds.split == "morning_afternoon":
        morning = sum(current.headline_by_hour_of_day.get(h, 0) for h in MORNING_HOURS)
        afternoon = sum(current.headline_by_hour_of_day.get(h, 0) for h in AFTERNOON_HOURS)
        if abs(morning - afternoon) <= margin:
            return None
        values = {"name": name, "morning": morning, "afternoon": afternoon}
        return ("morning" if morning > afternoon else "afternoon"), values

    weekday_days = sum(current.weekday_occurrences.get(d, 0) for d in WEEKDAY_DAYS)
    weekend_days = sum(current.weekday_occurrences.get(d, 0) for d in WEEKEND_DAYS)
    if not weekday_days or not weekend_days:
        return None
    weekday_avg = sum(current.headline_by_weekday.get(d, 0) for d in WEEKDAY_DAYS) / weekday_days
    weekend_avg = sum(current.headline_by_weekday.get(d, 0) for d in WEEKEND_DAYS) / weekend_days
    if abs(weekday_avg - weekend_avg) <= margin:
        return None
    values = {"name": name, "weekday": _fmt1(weekday_avg), "weekend": _fmt1(weekend_avg)}
    return ("weekday" if weekday_avg > weekend_avg else "weekend"), values


def check_rating_change(ctx: RuleContext) -> CheckResult:
    current, previous = ctx.current, ctx.previous
    if not current.rated_count or not previous.rated_count:
        return None
    change = ctx.comparator(current.average_rating, previous.average_rating)
    if abs(change.delta) < ctx.thresholds.rating_delta:
        return None
    values = {
        "abs_delta": _fmt1(abs(change.delta)),
        "current": _fmt1(current.average_rating),
        "previous": _fmt1(previous.average_rating),
        "period": ctx.period,
    }
    return ("up" if change.delta > 0 else "down"), values


def check_dominant_share(ctx: RuleContext) -> CheckResult:
    level = ctx.thresholds.bucket_level
    buckets = _buckets(ctx.current, level)
    if not buckets:
        # every logged hour is outside a bucket (no category, or no group)
        return "unassigned", {
            "percent": 100,
            "level": level,
            "color": DEFAULT_COLOR,
            "period": ctx.period,
        }
    bucket_id, hours = next(iter(buckets.items()))
    name, color = _bucket_name_color(ctx, bucket_id)
    return "default", {
        "percent": ctx.current.share_of_total(hours),
        "name": name,
        "color": color,
        "period": ctx.period,
    }


# ---------- Rule Table ----------

RULES: List[InsightRule] = [
    InsightRule("peak_hour", "peak_rating_floor", check_peak_hour, {
        "default": ("sun", "green", "Ratings peak around {hour} (avg {avg})"),
    }),
    InsightRule("low_hour", "low_rating_ceiling", check_low_hour, {
        "default": ("moon", "orange", "Ratings dip lowest around {hour} (avg {avg})"),
    }),
    InsightRule("headline_change", "headline_delta", check_headline_change, {
        "up": ("arrow-up", "green",
               "{name} time up {delta}h (+{percent}%) from last {period}"),
        "down": ("arrow-down", "orange",
                 "{name} time down {abs_delta}h from last {period}"),
    }, needs_headline=True),
    InsightRule("bucket_change", "bucket_delta", check_bucket_change, {
        "up": ("arrow-up", "{color}",
               "{name} up {delta}h (+{percent}%) vs last {period}"),
        "down": ("arrow-down", "{color}",
                 "{name} down {abs_delta}h from last {period}"),
    }),
    InsightRule("best_day", None, check_best_day, {
        "total": ("star", "yellow", "{day} had most {name} time ({hours}h)"),
        "average": ("star", "yellow", "{day}s have most {name} time (avg {avg}h)"),
    }, needs_headline=True),
    InsightRule("split", "split", check_split, {
        "morning": ("sun", "yellow",
                    "More {name} in the morning ({morning}h vs {afternoon}h after noon)"),
        "afternoon": ("sun", "orange",
                      "More {name} in the afternoon ({afternoon}h vs {morning}h before noon)"),
        "weekday": ("calendar", "green",
                    "{name} averages {weekday}h on weekdays vs {weekend}h on weekends"),
        "weekend": ("calendar", "orange",
                    "{name} averages {weekend}h on weekends vs {weekday}h on weekdays"),
    }, needs_headline=True),
    InsightRule("rating_change", "rating_delta", check_rating_change, {
        "up": ("arrow-up", "green",
               "Average rating up {abs_delta} from last {period} ({current} vs {previous})"),
        "down": ("arrow-down", "orange",
                 "Average rating down {abs_delta} from last {period} ({current} vs {previous})"),
    }),
    InsightRule("dominant_share", None, check_dominant_share, {
        "default": ("pie", "{color}", "{percent}% of your {period} spent on {name}"),
        "unassigned": ("pie", "{color}", "{percent}% of your {period} has no {level}"),
    }),
]


def generate_insights(current: AggregateResult, previous: AggregateResult,
                      index: CategoryIndex, thresholds: InsightThresholds,
                      comparator: Callable[[Any, Any], TrendComparison] = compare,
                      rules: Optional[List[InsightRule]] = None) -> InsightReport:
    """
    Evaluate the rule table against the current and previous aggregates.

    Returns an InsightReport with insufficient_data=True (and no insights)
    when nothing was logged in the current period.
    """
    if current.total_hours == 0:
        logger.debug("No logs in current period, skipping insight rules")
        return InsightReport(insights=[], insufficient_data=True)

    ctx = RuleContext(current, previous, index, thresholds, comparator)
    insights: List[Insight] = []
    for rule in rules if rules is not None else RULES:
        insight = rule.evaluate(ctx)
        if insight is None:
            continue
        insights.append(insight)
        logger.debug(f"Insight rule '{rule.name}' fired: {insight.text}")
        if len(insights) >= MAX_INSIGHTS:
            break
    return InsightReport(insights=insights, insufficient_data=False)
