"""Request-scoped value types shared by the chart pipeline."""

from __future__ import annotations

import datetime as _dt
import enum
import math
from dataclasses import dataclass
from typing import Optional, Union


class AlarmState(enum.Enum):
    OK = "OK"
    ALARM = "Alarm"
    INSUFFICIENT_DATA = "InsufficientData"


class Comparison(enum.Enum):
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    EQ = "eq"


class OutputFormat(enum.Enum):
    STREAM = "stream"
    BUFFER = "buffer"
    DATA_URI = "dataUri"


class Gap:
    """Marker for "no fill here" in an overlay series.

    Converted to NaN only when handed to the renderer.
    """

    _instance: Optional["Gap"] = None

    def __new__(cls) -> "Gap":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "GAP"

    def __reduce__(self):
        return (Gap, ())


GAP = Gap()

OverlayValue = Union[int, Gap]


@dataclass(frozen=True)
class StateTransition:
    """A single alarm state change.

    ``time`` is when the provider recorded the change. ``begin_time`` is when the
    condition behind ``new_state`` started and ``prior_begin_time`` is the onset the
    provider reported for ``old_state``; either may precede ``time`` by an
    arbitrary amount.
    """

    time: _dt.datetime
    old_state: AlarmState
    new_state: AlarmState
    begin_time: Optional[_dt.datetime] = None
    prior_begin_time: Optional[_dt.datetime] = None

    @property
    def onset(self) -> _dt.datetime:
        return self.begin_time if self.begin_time is not None else self.time


@dataclass(frozen=True)
class Sample:
    time: _dt.datetime
    value: float


@dataclass(frozen=True)
class Window:
    start_time: _dt.datetime
    end_time: _dt.datetime

    def __post_init__(self) -> None:
        if self.start_time > self.end_time:
            raise ValueError(f"window start {self.start_time} is after end {self.end_time}")


@dataclass(frozen=True)
class ThresholdSpec:
    value: Optional[float]
    comparison: Optional[Comparison] = None


@dataclass(frozen=True)
class OverlayPoint:
    x: _dt.datetime
    y: OverlayValue

    @property
    def is_gap(self) -> bool:
        return self.y is GAP

    def plot_value(self) -> float:
        return math.nan if self.y is GAP else float(self.y)


def utc(value: _dt.datetime) -> _dt.datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=_dt.timezone.utc)
    return value.astimezone(_dt.timezone.utc)
