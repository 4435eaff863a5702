"""Rasterize a ``ChartConfig`` with matplotlib's Agg canvas.

Call :func:`configure_backend` once before rendering; importing this module does
not touch matplotlib's global state.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional
from zoneinfo import ZoneInfo

import matplotlib
import matplotlib.dates as mdates
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from alert_chart.axis import ThresholdFill
from alert_chart.model import OutputFormat
from alert_chart.options import (
    ACTUAL_SERIES,
    METRIC_SERIES,
    NOTIFICATION_SERIES,
    THRESHOLD_SERIES,
    AxisConfig,
    ChartConfig,
    LineSeries,
)
from alert_chart.settings import DEFAULT_CHART_SETTINGS, ChartSettings

LOGGER = logging.getLogger(__name__)

_configured: Optional[ChartSettings] = None


def configure_backend(settings: ChartSettings = DEFAULT_CHART_SETTINGS) -> None:
    global _configured
    if _configured == settings:
        return
    matplotlib.use("Agg", force=True)
    matplotlib.rcParams.update(
        {
            "font.family": settings.font_family,
            "text.color": settings.font_color,
            "axes.labelcolor": settings.font_color,
            "axes.titlecolor": settings.font_color,
            "xtick.color": settings.font_color,
            "ytick.color": settings.font_color,
            "figure.facecolor": settings.background_color,
            "axes.facecolor": settings.background_color,
            "hatch.color": settings.threshold_color,
        }
    )
    _configured = settings
    LOGGER.debug("configured matplotlib Agg backend with font %s", settings.font_family)


def backend_configured() -> bool:
    return _configured is not None


@dataclass(frozen=True)
class RenderResult:
    stream: Optional[BinaryIO] = None
    buffer: Optional[bytes] = None
    data_uri: Optional[str] = None


def _number_label(value: float, _position: int) -> str:
    return f"{value:,.10g}"


class ChartRenderer:
    def __init__(self, settings: ChartSettings = DEFAULT_CHART_SETTINGS) -> None:
        self._settings = settings

    def render(self, config: ChartConfig, output_format: OutputFormat = OutputFormat.STREAM) -> RenderResult:
        if not backend_configured():
            raise RuntimeError("configure_backend() must be called before rendering charts")
        figure = self._draw(config)
        buffer = io.BytesIO()
        figure.savefig(buffer, format="png", facecolor=self._settings.background_color)
        if output_format is OutputFormat.BUFFER:
            return RenderResult(buffer=buffer.getvalue())
        if output_format is OutputFormat.DATA_URI:
            encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
            return RenderResult(data_uri=f"data:image/png;base64,{encoded}")
        buffer.seek(0)
        return RenderResult(stream=buffer)

    def _draw(self, config: ChartConfig) -> Figure:
        settings = self._settings
        width = config.width or settings.width
        height = config.height or settings.height
        figure = Figure(figsize=(width / settings.dpi, height / settings.dpi), dpi=settings.dpi)
        FigureCanvasAgg(figure)
        axes = figure.add_subplot(1, 1, 1)
        timezone = ZoneInfo(settings.timezone)

        labels = config.labels
        metric = config.line(METRIC_SERIES)
        if metric is not None and labels:
            axes.plot(labels, metric.values, color=settings.metric_color, linewidth=1.5, label=metric.label)

        threshold = config.line(THRESHOLD_SERIES)
        if threshold is not None and labels:
            axes.plot(labels, threshold.values, color=settings.threshold_color, linewidth=2, label=threshold.label)

        self._apply_value_hints(axes, config.axes)
        if threshold is not None and labels:
            self._shade_threshold(axes, labels, threshold)

        alarm_axes = self._draw_overlays(axes, config)

        if config.axes.time_min is not None and config.axes.time_max is not None:
            axes.set_xlim(config.axes.time_min, config.axes.time_max)
        locator = mdates.AutoDateLocator(tz=timezone)
        axes.xaxis.set_major_locator(locator)
        axes.xaxis.set_major_formatter(mdates.DateFormatter(settings.tick_format, tz=timezone))
        axes.yaxis.set_major_formatter(FuncFormatter(_number_label))
        axes.grid(axis="y", color="#dddddd", linewidth=0.8)
        if config.display_title:
            axes.set_title(config.title)
        handles, names = axes.get_legend_handles_labels()
        if alarm_axes is not None:
            alarm_handles, alarm_names = alarm_axes.get_legend_handles_labels()
            handles += alarm_handles
            names += alarm_names
        if handles:
            axes.legend(handles, names, loc="upper left", frameon=False)
        axes.tick_params(axis="x", labelrotation=30)
        figure.tight_layout()
        return figure

    @staticmethod
    def _apply_value_hints(axes: Axes, hints: AxisConfig) -> None:
        bottom, top = axes.get_ylim()
        if hints.value_suggested_min is not None and hints.value_suggested_min < bottom:
            bottom = hints.value_suggested_min
        if hints.value_suggested_max is not None and hints.value_suggested_max > top:
            top = hints.value_suggested_max
        axes.set_ylim(bottom, top)

    def _shade_threshold(self, axes: Axes, labels: List, threshold: LineSeries) -> None:
        if threshold.fill is ThresholdFill.NONE:
            return
        bottom, top = axes.get_ylim()
        edge = top if threshold.fill is ThresholdFill.ABOVE else bottom
        axes.fill_between(
            labels,
            threshold.values,
            edge,
            facecolor="none",
            edgecolor=self._settings.threshold_color,
            hatch=self._settings.threshold_hatch,
            linewidth=0,
            alpha=0.5,
        )
        axes.set_ylim(bottom, top)

    def _draw_overlays(self, axes: Axes, config: ChartConfig) -> Optional[Axes]:
        if not config.overlays:
            return None
        settings = self._settings
        alarm_axes = axes.twinx()
        alarm_axes.set_ylim(config.axes.alarm_min, config.axes.alarm_max)
        alarm_axes.set_axis_off()
        styles = {
            NOTIFICATION_SERIES: (settings.alarm_color, settings.alarm_alpha),
            ACTUAL_SERIES: (settings.actual_alarm_color, settings.actual_alarm_alpha),
        }
        for overlay in config.overlays:
            color, alpha = styles.get(overlay.key, (settings.alarm_color, settings.alarm_alpha))
            xs = [point.x for point in overlay.points]
            ys = [point.plot_value() for point in overlay.points]
            alarm_axes.fill_between(xs, ys, config.axes.alarm_min, color=color, alpha=alpha, linewidth=0, label=overlay.label)
        return alarm_axes
