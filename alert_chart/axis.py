from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from alert_chart.model import Comparison, ThresholdSpec
from alert_chart.settings import AXIS_POLICY


class ThresholdFill(enum.Enum):
    NONE = "none"
    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class AxisHints:
    suggested_min: Optional[float] = None
    suggested_max: Optional[float] = None
    fill: ThresholdFill = ThresholdFill.NONE


def _finite(values: Iterable[float]) -> List[float]:
    return [value for value in values if value is not None and not math.isnan(value)]


def compute_axis_hints(values: Iterable[float], threshold: Optional[ThresholdSpec]) -> AxisHints:
    """Value-axis hints that keep the threshold line visible with some headroom.

    A threshold of ``0`` is treated the same as no threshold at all.
    """

    if threshold is None or not threshold.value:
        return AxisHints()
    limit = threshold.value
    margin = AXIS_POLICY.threshold_margin
    finite = _finite(values)

    if threshold.comparison in (Comparison.GT, Comparison.GTE):
        if finite and max(finite) <= limit:
            return AxisHints(suggested_max=limit + (limit - min(finite)) * margin, fill=ThresholdFill.ABOVE)
        return AxisHints(fill=ThresholdFill.ABOVE)

    if threshold.comparison in (Comparison.LT, Comparison.LTE):
        if finite and min(finite) >= limit:
            return AxisHints(suggested_min=limit - (max(finite) - limit) * margin, fill=ThresholdFill.BELOW)
        return AxisHints(fill=ThresholdFill.BELOW)

    return AxisHints()
