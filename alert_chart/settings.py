from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from alert_chart.errors import ConfigError


@dataclass(frozen=True)
class WindowPolicy:
    ideal_data_points: int
    day_seconds: int
    evaluation_span_multiplier: int
    evaluation_span_lookback: int
    max_backfill_samples: int
    default_period_seconds: int


WINDOW_POLICY = WindowPolicy(
    ideal_data_points=100,
    day_seconds=86400,
    evaluation_span_multiplier=4,
    evaluation_span_lookback=2,
    max_backfill_samples=1440,
    default_period_seconds=300,
)


@dataclass(frozen=True)
class AxisPolicy:
    threshold_margin: float


AXIS_POLICY = AxisPolicy(threshold_margin=0.1)


@dataclass(frozen=True)
class ChartSettings:
    width: int = 800
    height: int = 480
    dpi: int = 100
    font_family: str = "DejaVu Sans"
    font_color: str = "black"
    background_color: str = "white"
    metric_color: str = "#36a2eb"
    threshold_color: str = "#ff6384"
    alarm_color: str = "#ff6384"
    actual_alarm_color: str = "#ff9f40"
    alarm_alpha: float = 0.4
    actual_alarm_alpha: float = 0.25
    threshold_hatch: str = "//"
    timezone: str = "UTC"
    tick_format: str = "%d/%m %H:%M"


DEFAULT_CHART_SETTINGS = ChartSettings()


def _coerce_value(key: str, raw: Any, source: Path) -> Any:
    default = getattr(DEFAULT_CHART_SETTINGS, key)
    expected = type(default)
    if isinstance(raw, bool) or (expected is int and isinstance(raw, float)):
        raise ConfigError(f"{source} setting {key} expects {expected.__name__}, got {raw!r}")
    try:
        return expected(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source} setting {key} expects {expected.__name__}, got {raw!r}") from exc


def _coerce_settings(data: Dict[str, Any], source: Path) -> ChartSettings:
    known = {field.name: field for field in fields(ChartSettings)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"{source} has unknown chart settings: {', '.join(unknown)}")
    values = {key: _coerce_value(key, raw, source) for key, raw in data.items()}
    if "timezone" in values:
        try:
            ZoneInfo(values["timezone"])
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"{source} setting timezone is not a known time zone: {values['timezone']!r}") from exc
    return ChartSettings(**values)


def load_settings(path: Path) -> ChartSettings:
    if not path.is_file():
        raise ConfigError(f"settings file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return DEFAULT_CHART_SETTINGS
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of chart settings")
    chart = data.get("chart", data)
    if not isinstance(chart, dict):
        raise ConfigError(f"{path} chart section must be a mapping")
    return _coerce_settings(chart, path)
