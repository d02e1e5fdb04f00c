# daylog/utils/reporting/trends.py
'''
Period-over-period comparison of a single metric.
'''

import math
from dataclasses import asdict, dataclass
from typing import Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class TrendComparison:
    delta: Number
    percent_delta: Optional[int]
    has_prior_data: bool

    @property
    def direction(self) -> int:
        if self.delta > 0:
            return 1
        if self.delta < 0:
            return -1
        return 0

    def to_dict(self) -> dict:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compare(current: Number, previous: Number) -> TrendComparison:
    """
    Compare a metric against the previous period.
    A previous value of zero means there is no baseline: the delta is still
    reported but percent_delta is None.
    """
    delta = current - previous
    if previous == 0:
        return TrendComparison(delta=delta, percent_delta=None, has_prior_data=False)
    percent = round_half_up(delta / previous * 100)
    return TrendComparison(delta=delta, percent_delta=percent, has_prior_data=True)
