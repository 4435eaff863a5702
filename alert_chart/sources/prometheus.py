"""Metric samples from Prometheus, either over HTTP or from an exposition log."""

from __future__ import annotations

import datetime as _dt
import json
import logging
import math
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from prometheus_client.parser import text_string_to_metric_families

from alert_chart.model import Sample

LOGGER = logging.getLogger(__name__)

_PROM_DATE_FMT = "%Y-%m-%dT%H:%M:%SZ"


class PrometheusClient:
    def __init__(self, base_url: str, token: str | None, timeout_seconds: float) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout_seconds = timeout_seconds

    def query_range(
        self, query: str, start: _dt.datetime, end: _dt.datetime, step_seconds: int
    ) -> List[Dict[str, object]]:
        start_str = start.astimezone(_dt.timezone.utc).strftime(_PROM_DATE_FMT)
        end_str = end.astimezone(_dt.timezone.utc).strftime(_PROM_DATE_FMT)
        params = urlencode({"query": query, "start": start_str, "end": end_str, "step": step_seconds})
        request = Request(f"{self._base_url}/api/v1/query_range?{params}")
        if self._token:
            request.add_header("Authorization", f"Bearer {self._token}")
        LOGGER.debug("querying %s for %s", self._base_url, query)
        with urlopen(request, timeout=self._timeout_seconds) as response:
            payload = json.loads(response.read().decode("utf-8"))
        status = payload.get("status")
        if status != "success":  # pragma: no cover - passthrough for API errors
            raise RuntimeError(f"Prometheus query failed with status {status}: {payload}")
        result = payload.get("data", {}).get("result")
        if not isinstance(result, list):  # pragma: no cover - defensive
            raise ValueError("Prometheus response missing result array")
        return result


def _coerce_float(raw: object) -> float:
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan


def _from_epoch(seconds: float) -> _dt.datetime:
    return _dt.datetime.fromtimestamp(float(seconds), tz=_dt.timezone.utc)


def samples_from_range_result(result: List[Dict[str, object]]) -> List[Sample]:
    """Samples of the first series in a range query result.

    Values Prometheus cannot express as numbers are kept as NaN so the chart shows a gap.
    """

    if not result:
        return []
    if len(result) > 1:
        LOGGER.warning("range query returned %d series; charting the first", len(result))
    values = result[0].get("values") or []
    samples = [Sample(time=_from_epoch(timestamp), value=_coerce_float(raw)) for timestamp, raw in values]  # type: ignore[union-attr]
    return sorted(samples, key=lambda sample: sample.time)


def samples_from_exposition(
    metrics_text: str, metric: str, labels: Optional[Mapping[str, str]] = None
) -> List[Sample]:
    samples: List[Sample] = []
    for family in text_string_to_metric_families(metrics_text):
        for sample in family.samples:
            if sample.name != metric:
                continue
            if labels and any(sample.labels.get(key) != value for key, value in labels.items()):
                continue
            if sample.timestamp is None:
                raise ValueError(f"sample for {sample.name} missing timestamp; required for charting")
            samples.append(Sample(time=_from_epoch(float(sample.timestamp)), value=float(sample.value)))
    return sorted(samples, key=lambda item: item.time)
