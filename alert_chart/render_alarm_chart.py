#!/usr/bin/env python3
"""Render a CloudWatch alarm chart: metric, threshold and alarm state overlays.

The chart window defaults to about one hundred samples of the alarm's period and
is extended backwards when the alarm history shows a condition that was already
active before the window started.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

from botocore.exceptions import BotoCoreError, ClientError

from alert_chart.chart import generate_alarm_graph
from alert_chart.cli_common import add_output_arguments, configure_logging, resolve_settings, write_result
from alert_chart.errors import AlertChartError
from alert_chart.model import OutputFormat
from alert_chart.render import configure_backend


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a chart for a CloudWatch alarm")
    parser.add_argument("--alarm", required=True, help="Name of the CloudWatch alarm")
    parser.add_argument(
        "--region",
        default=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
        help="AWS region (default: AWS_REGION or AWS_DEFAULT_REGION)",
    )
    parser.add_argument(
        "--lookback-seconds",
        type=int,
        default=None,
        help="Fixed chart timespan in seconds (default: derived from the alarm period and history)",
    )
    add_output_arguments(parser)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose)

    try:
        settings = resolve_settings(args.settings)
        configure_backend(settings)
        result = generate_alarm_graph(
            args.alarm,
            region=args.region,
            lookback_seconds=args.lookback_seconds,
            output_format=OutputFormat(args.format),
            settings=settings,
        )
        written = write_result(result, args.output)
    except (AlertChartError, BotoCoreError, ClientError, ValueError, OSError) as exc:
        print(f"::error ::{exc}", file=sys.stderr)
        return 1
    if written is not None:
        print(f"Wrote {args.alarm} chart to {written}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
