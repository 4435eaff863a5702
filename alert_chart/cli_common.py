from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path
from typing import Optional

from alert_chart.model import OutputFormat
from alert_chart.render import RenderResult
from alert_chart.settings import DEFAULT_CHART_SETTINGS, ChartSettings, load_settings


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.STREAM.value,
        help="Output format: stream, buffer or dataUri (default: stream)",
    )
    parser.add_argument("--output", type=Path, default=None, help="File to write the chart to")
    parser.add_argument("--settings", type=Path, default=None, help="YAML file with chart settings")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def resolve_settings(path: Optional[Path]) -> ChartSettings:
    if path is None:
        return DEFAULT_CHART_SETTINGS
    return load_settings(path)


def write_result(result: RenderResult, output: Optional[Path]) -> Optional[Path]:
    """Write whichever payload ``result`` carries; data URIs go to stdout without ``output``."""

    if result.data_uri is not None:
        if output is None:
            print(result.data_uri)
            return None
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.data_uri, encoding="ascii")
        return output
    if output is None:
        raise ValueError("--output is required for stream and buffer formats")
    output.parent.mkdir(parents=True, exist_ok=True)
    if result.buffer is not None:
        output.write_bytes(result.buffer)
        return output
    if result.stream is None:
        raise ValueError("render result carries no payload")
    with output.open("wb") as handle:
        shutil.copyfileobj(result.stream, handle)
    return output
