#!/usr/bin/env python3
"""Render a chart for a Prometheus metric with an optional threshold.

Samples come either from a range query against the Prometheus HTTP API or from
a timestamped exposition log. Alarm state history recorded in a YAML (or JSON)
file can be overlaid on top of the samples.
"""

from __future__ import annotations

import argparse
import datetime as _dt
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from alert_chart.chart import generate_graph
from alert_chart.cli_common import add_output_arguments, configure_logging, resolve_settings, write_result
from alert_chart.errors import AlertChartError, MalformedHistoryError
from alert_chart.model import OutputFormat, Sample, StateTransition, ThresholdSpec, Window
from alert_chart.normalize import normalize_history, parse_comparison, parse_timestamp
from alert_chart.options import GraphOptions
from alert_chart.render import configure_backend
from alert_chart.sources.prometheus import PrometheusClient, samples_from_exposition, samples_from_range_result

_DEFAULT_STEP_SECONDS = 300


def _parse_labels(entries: Sequence[str]) -> Dict[str, str]:
    labels: Dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"--label expects NAME=VALUE, received '{entry}'")
        labels[key] = value
    return labels


def load_history(path: Path) -> List[StateTransition]:
    """Read alarm history items (``timestamp`` + ``historyData``) from a YAML or JSON file."""

    if not path.is_file():
        raise MalformedHistoryError(f"history file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or []
    if isinstance(data, dict):
        data = data.get("AlarmHistoryItems", data.get("items"))
    if not isinstance(data, list):
        raise MalformedHistoryError(f"{path} must contain a list of history items")
    records = []
    for item in data:
        if not isinstance(item, dict):
            raise MalformedHistoryError(f"{path} history items must be mappings")
        timestamp = item.get("timestamp", item.get("Timestamp"))
        history_data = item.get("historyData", item.get("HistoryData"))
        if timestamp is None or history_data is None:
            raise MalformedHistoryError(f"{path} history item missing timestamp or historyData")
        if not isinstance(timestamp, _dt.datetime):
            timestamp = parse_timestamp(str(timestamp))
        records.append((timestamp, history_data))
    return normalize_history(records)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a metric chart from Prometheus samples")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--prom-url", help="Base URL for the Prometheus HTTP API")
    source.add_argument("--exposition", type=Path, help="Timestamped Prometheus exposition log")
    parser.add_argument("--query", help="PromQL range query (with --prom-url)")
    parser.add_argument("--metric", help="Sample name to chart (with --exposition)")
    parser.add_argument("--label", action="append", default=[], help="NAME=VALUE label filter (with --exposition)")
    parser.add_argument("--hours", type=float, default=24.0, help="Hours before now to chart (default: 24)")
    parser.add_argument(
        "--step-seconds",
        type=int,
        default=_DEFAULT_STEP_SECONDS,
        help="Query resolution step in seconds (default: 300)",
    )
    parser.add_argument("--token", default=os.getenv("PROMETHEUS_BEARER_TOKEN"), help="Bearer token for Prometheus")
    parser.add_argument(
        "--timeout-seconds", type=float, default=30.0, help="HTTP timeout when querying Prometheus (default: 30)"
    )
    parser.add_argument("--threshold", type=float, default=None, help="Alarm threshold value")
    parser.add_argument("--comparison", default=None, help="Threshold comparison (gt, gte, lt, lte or eq)")
    parser.add_argument("--history", type=Path, default=None, help="YAML/JSON alarm history to overlay")
    parser.add_argument("--title", default=None, help="Chart title")
    parser.add_argument("--series-label", default="Metric", help="Legend label for the samples")
    add_output_arguments(parser)
    return parser.parse_args(argv)


def _collect_samples(args: argparse.Namespace) -> tuple[List[Sample], Optional[Window]]:
    if args.prom_url:
        if not args.query:
            raise ValueError("--query is required with --prom-url")
        end = _dt.datetime.now(_dt.timezone.utc)
        window = Window(start_time=end - _dt.timedelta(hours=args.hours), end_time=end)
        client = PrometheusClient(args.prom_url, args.token, args.timeout_seconds)
        result = client.query_range(args.query, window.start_time, window.end_time, args.step_seconds)
        return samples_from_range_result(result), window
    if not args.metric:
        raise ValueError("--metric is required with --exposition")
    text = args.exposition.read_text(encoding="utf-8")
    return samples_from_exposition(text, args.metric, _parse_labels(args.label)), None


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose)

    try:
        settings = resolve_settings(args.settings)
        samples, window = _collect_samples(args)
        threshold = None
        if args.threshold is not None:
            threshold = ThresholdSpec(args.threshold, parse_comparison(args.comparison))
        options = GraphOptions(
            samples=samples,
            samples_label=args.series_label,
            title=args.title,
            threshold=threshold,
            transitions=load_history(args.history) if args.history is not None else None,
            window=window,
            output_format=OutputFormat(args.format),
        )
        configure_backend(settings)
        written = write_result(generate_graph(options, settings), args.output)
    except (AlertChartError, ValueError, OSError) as exc:
        print(f"::error ::{exc}", file=sys.stderr)
        return 1
    if written is not None:
        print(f"Wrote chart with {len(samples)} samples to {written}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
