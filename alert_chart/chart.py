from __future__ import annotations

from typing import Optional

from alert_chart.model import OutputFormat
from alert_chart.options import GraphOptions, build_chart_config
from alert_chart.render import ChartRenderer, RenderResult
from alert_chart.settings import DEFAULT_CHART_SETTINGS, ChartSettings
from alert_chart.sources.cloudwatch import CloudWatchSource


def generate_graph(options: GraphOptions, settings: ChartSettings = DEFAULT_CHART_SETTINGS) -> RenderResult:
    """Render ``options`` in its requested output format.

    :func:`alert_chart.render.configure_backend` must have been called first.
    """

    config = build_chart_config(options)
    return ChartRenderer(settings).render(config, options.output_format)


def generate_alarm_graph(
    alarm_name: str,
    region: Optional[str] = None,
    lookback_seconds: Optional[int] = None,
    output_format: OutputFormat = OutputFormat.STREAM,
    settings: ChartSettings = DEFAULT_CHART_SETTINGS,
    source: Optional[CloudWatchSource] = None,
) -> RenderResult:
    source = source if source is not None else CloudWatchSource(region)
    options = source.alarm_graph_options(alarm_name, lookback_seconds)
    options.output_format = output_format
    return generate_graph(options, settings)
