"""Compose samples, threshold and alarm overlays into one chart configuration."""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from alert_chart.axis import ThresholdFill, compute_axis_hints
from alert_chart.model import OutputFormat, OverlayPoint, Sample, StateTransition, ThresholdSpec, Window
from alert_chart.timeline import synthesize_overlays

METRIC_SERIES = "metric"
THRESHOLD_SERIES = "threshold"
NOTIFICATION_SERIES = "alarm"
ACTUAL_SERIES = "alarm-actual"


@dataclass
class GraphOptions:
    samples: List[Sample]
    samples_label: str = "Metric"
    title: Optional[str] = None
    threshold: Optional[ThresholdSpec] = None
    transitions: Optional[List[StateTransition]] = None
    window: Optional[Window] = None
    chart_width: Optional[int] = None
    chart_height: Optional[int] = None
    output_format: OutputFormat = OutputFormat.STREAM


@dataclass(frozen=True)
class LineSeries:
    key: str
    label: str
    values: List[float]
    fill: ThresholdFill = ThresholdFill.NONE


@dataclass(frozen=True)
class OverlayFill:
    key: str
    label: str
    points: List[OverlayPoint]


@dataclass(frozen=True)
class AxisConfig:
    value_suggested_min: Optional[float] = None
    value_suggested_max: Optional[float] = None
    alarm_min: float = 0.0
    alarm_max: float = 1.0
    time_min: Optional[_dt.datetime] = None
    time_max: Optional[_dt.datetime] = None


@dataclass(frozen=True)
class ChartConfig:
    title: Optional[str]
    labels: List[_dt.datetime]
    lines: List[LineSeries]
    overlays: List[OverlayFill]
    axes: AxisConfig
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def display_title(self) -> bool:
        return bool(self.title)

    def line(self, key: str) -> Optional[LineSeries]:
        for series in self.lines:
            if series.key == key:
                return series
        return None

    def overlay(self, key: str) -> Optional[OverlayFill]:
        for series in self.overlays:
            if series.key == key:
                return series
        return None

    def to_dict(self) -> Dict[str, Any]:
        axes: Dict[str, Any] = {
            "value": _compact(
                {"suggestedMin": self.axes.value_suggested_min, "suggestedMax": self.axes.value_suggested_max}
            ),
            "alarm": {"display": False, "suggestedMin": self.axes.alarm_min, "suggestedMax": self.axes.alarm_max},
            "time": _compact({"min": _iso(self.axes.time_min), "max": _iso(self.axes.time_max)}),
        }
        datasets: List[Dict[str, Any]] = []
        for line in self.lines:
            data = [None if math.isnan(value) else value for value in line.values]
            entry: Dict[str, Any] = {"key": line.key, "label": line.label, "data": data}
            if line.fill is not ThresholdFill.NONE:
                entry["fill"] = line.fill.value
            datasets.append(entry)
        for overlay in self.overlays:
            datasets.append(
                {
                    "key": overlay.key,
                    "label": overlay.label,
                    "data": [{"x": _iso(point.x), "y": None if point.is_gap else point.y} for point in overlay.points],
                }
            )
        return _compact(
            {
                "title": {"display": self.display_title, "text": self.title} if self.title else {"display": False},
                "labels": [_iso(label) for label in self.labels],
                "datasets": datasets,
                "axes": axes,
            }
        )


def _iso(value: Optional[_dt.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def format_dimensions(dimensions: Optional[Sequence[Mapping[str, str]]]) -> str:
    if not dimensions:
        return ""
    return "".join(f"{dimension['Name']}={dimension['Value']} " for dimension in dimensions)


def build_chart_config(options: GraphOptions) -> ChartConfig:
    samples = options.samples
    values = [sample.value for sample in samples]
    hints = compute_axis_hints(values, options.threshold)

    lines = [LineSeries(key=METRIC_SERIES, label=options.samples_label, values=values)]
    if options.threshold is not None and options.threshold.value is not None:
        lines.append(
            LineSeries(
                key=THRESHOLD_SERIES,
                label="Threshold",
                values=[options.threshold.value] * len(samples),
                fill=hints.fill,
            )
        )

    overlays: List[OverlayFill] = []
    if options.transitions is not None:
        series = synthesize_overlays(options.transitions, options.window, samples)
        if series.notification:
            overlays.append(OverlayFill(key=NOTIFICATION_SERIES, label="Alarm", points=series.notification))
        if series.actual:
            overlays.append(OverlayFill(key=ACTUAL_SERIES, label="Alarm (actual)", points=series.actual))

    window = options.window
    return ChartConfig(
        title=options.title or None,
        labels=[sample.time for sample in samples],
        lines=lines,
        overlays=overlays,
        axes=AxisConfig(
            value_suggested_min=hints.suggested_min,
            value_suggested_max=hints.suggested_max,
            time_min=window.start_time if window is not None else None,
            time_max=window.end_time if window is not None else None,
        ),
        width=options.chart_width,
        height=options.chart_height,
    )
