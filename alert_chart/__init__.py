"""Alarm history charts: metric samples, threshold and alarm state overlays."""

from .axis import AxisHints, ThresholdFill, compute_axis_hints
from .chart import generate_alarm_graph, generate_graph
from .errors import (
    AlarmNotFoundError,
    AlertChartError,
    ConfigError,
    IncompleteAlarmError,
    MalformedHistoryError,
)
from .model import (
    GAP,
    AlarmState,
    Comparison,
    OutputFormat,
    OverlayPoint,
    Sample,
    StateTransition,
    ThresholdSpec,
    Window,
)
from .normalize import normalize_history, normalize_history_record, parse_comparison, parse_state
from .options import ChartConfig, GraphOptions, build_chart_config
from .render import ChartRenderer, RenderResult, configure_backend
from .timeline import Anchor, OverlaySeries, synthesize_overlay, synthesize_overlays
from .window import default_lookback_seconds, default_window, resolve_window

__all__ = [
    "GAP",
    "AlarmNotFoundError",
    "AlarmState",
    "AlertChartError",
    "Anchor",
    "AxisHints",
    "ChartConfig",
    "ChartRenderer",
    "Comparison",
    "ConfigError",
    "GraphOptions",
    "IncompleteAlarmError",
    "MalformedHistoryError",
    "OutputFormat",
    "OverlayPoint",
    "OverlaySeries",
    "RenderResult",
    "Sample",
    "StateTransition",
    "ThresholdFill",
    "ThresholdSpec",
    "Window",
    "build_chart_config",
    "compute_axis_hints",
    "configure_backend",
    "default_lookback_seconds",
    "default_window",
    "generate_alarm_graph",
    "generate_graph",
    "normalize_history",
    "normalize_history_record",
    "parse_comparison",
    "parse_state",
    "resolve_window",
    "synthesize_overlay",
    "synthesize_overlays",
]
