from __future__ import annotations

import datetime as dt
import math
import textwrap

import pytest

from alert_chart.sources.prometheus import PrometheusClient, samples_from_exposition, samples_from_range_result

_EXPOSITION = textwrap.dedent(
    """
    # HELP queue_depth Pending items in the work queue.
    # TYPE queue_depth gauge
    queue_depth{environment="test"} 5 1700000060000
    queue_depth{environment="prod"} 9 1700000000000
    queue_depth{environment="test"} 3 1700000000000
    # HELP other_metric Unrelated metric.
    # TYPE other_metric gauge
    other_metric{environment="test"} 1 1700000000000
    """
).lstrip()


def test_range_result_keeps_unparseable_values_as_nan() -> None:
    result = [
        {
            "metric": {"environment": "test"},
            "values": [[1700000060, "2.5"], [1700000000, "NaN"], [1700000120, "bogus"]],
        }
    ]

    samples = samples_from_range_result(result)

    assert [sample.time for sample in samples] == [
        dt.datetime.fromtimestamp(1700000000, tz=dt.timezone.utc),
        dt.datetime.fromtimestamp(1700000060, tz=dt.timezone.utc),
        dt.datetime.fromtimestamp(1700000120, tz=dt.timezone.utc),
    ]
    assert math.isnan(samples[0].value)
    assert samples[1].value == 2.5
    assert math.isnan(samples[2].value)


def test_range_result_without_series_is_empty() -> None:
    assert samples_from_range_result([]) == []


def test_range_result_uses_first_series() -> None:
    result = [
        {"metric": {"instance": "a"}, "values": [[1700000000, "1"]]},
        {"metric": {"instance": "b"}, "values": [[1700000000, "2"]]},
    ]

    assert [sample.value for sample in samples_from_range_result(result)] == [1.0]


def test_exposition_filters_by_metric_and_labels() -> None:
    samples = samples_from_exposition(_EXPOSITION, "queue_depth", {"environment": "test"})

    assert [sample.value for sample in samples] == [3.0, 5.0]
    assert samples[0].time < samples[1].time
    assert samples[0].time.year == 2023


def test_exposition_without_label_filter_returns_all_series() -> None:
    assert len(samples_from_exposition(_EXPOSITION, "queue_depth")) == 3


def test_exposition_requires_timestamps() -> None:
    text = "# TYPE queue_depth gauge\nqueue_depth 4\n"

    with pytest.raises(ValueError):
        samples_from_exposition(text, "queue_depth")


def test_client_strips_trailing_slash() -> None:
    client = PrometheusClient("http://prometheus.local:9090/", token=None, timeout_seconds=5)

    assert client._base_url == "http://prometheus.local:9090"
