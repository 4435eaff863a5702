"""Build chart options from CloudWatch metrics and alarm history."""

from __future__ import annotations

import datetime as _dt
import logging
import math
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import boto3

from alert_chart.errors import AlarmNotFoundError, IncompleteAlarmError
from alert_chart.model import Comparison, Sample, ThresholdSpec, utc
from alert_chart.normalize import normalize_history, parse_comparison
from alert_chart.options import GraphOptions, format_dimensions
from alert_chart.settings import WINDOW_POLICY
from alert_chart.window import default_window, resolve_window

LOGGER = logging.getLogger(__name__)

_REQUIRED_ALARM_FIELDS = ("MetricName", "Namespace", "Statistic")


class CloudWatchSource:
    def __init__(self, region: Optional[str] = None, client: Any = None) -> None:
        self.region = region
        self._client = client if client is not None else boto3.client("cloudwatch", region_name=region)

    def metric_samples(
        self,
        metric_name: str,
        namespace: str,
        statistic: str,
        start_time: _dt.datetime,
        end_time: _dt.datetime,
        period: int,
        dimensions: Optional[Sequence[Mapping[str, str]]] = None,
    ) -> Tuple[str, List[Sample]]:
        response = self._client.get_metric_statistics(
            MetricName=metric_name,
            Namespace=namespace,
            Dimensions=list(dimensions or []),
            Period=period,
            StartTime=start_time,
            EndTime=end_time,
            Statistics=["SampleCount", statistic],
        )
        samples = [
            Sample(time=utc(point["Timestamp"]), value=float(point.get(statistic, math.nan)))
            for point in response.get("Datapoints") or []
        ]
        samples.sort(key=lambda sample: sample.time)
        LOGGER.debug("fetched %d %s/%s datapoints", len(samples), namespace, metric_name)
        return response.get("Label") or "Metric", samples

    def metric_graph_options(
        self,
        metric_name: str,
        namespace: str,
        statistic: str,
        start_time: _dt.datetime,
        end_time: _dt.datetime,
        period: int,
        dimensions: Optional[Sequence[Mapping[str, str]]] = None,
        threshold: Optional[float] = None,
        threshold_comparison: Optional[Comparison] = None,
    ) -> GraphOptions:
        label, samples = self.metric_samples(
            metric_name, namespace, statistic, start_time, end_time, period, dimensions
        )
        title = f"{namespace} {metric_name} {format_dimensions(dimensions)}".strip()
        return GraphOptions(
            samples=samples,
            samples_label=label,
            title=title,
            threshold=ThresholdSpec(threshold, threshold_comparison) if threshold is not None else None,
        )

    def describe_alarm(self, alarm_name: str) -> Dict[str, Any]:
        response = self._client.describe_alarms(AlarmNames=[alarm_name])
        alarms = response.get("MetricAlarms") or []
        if not alarms:
            raise AlarmNotFoundError(alarm_name, self.region)
        alarm = alarms[0]
        missing = [field for field in _REQUIRED_ALARM_FIELDS if not alarm.get(field)]
        if missing:
            raise IncompleteAlarmError(alarm_name, missing)
        return alarm

    def alarm_history(self, alarm_name: str, start_time: _dt.datetime) -> Iterator[Tuple[_dt.datetime, str]]:
        request: Dict[str, Any] = {
            "AlarmName": alarm_name,
            "StartDate": start_time,
            "HistoryItemType": "StateUpdate",
            "ScanBy": "TimestampAscending",
        }
        while True:
            response = self._client.describe_alarm_history(**request)
            for item in response.get("AlarmHistoryItems") or []:
                yield item["Timestamp"], item.get("HistoryData") or "{}"
            token = response.get("NextToken")
            if not token:
                return
            request["NextToken"] = token

    def alarm_graph_options(
        self,
        alarm_name: str,
        lookback_seconds: Optional[int] = None,
        now: Optional[_dt.datetime] = None,
    ) -> GraphOptions:
        """Chart options for a CloudWatch alarm, its threshold and state history.

        With ``lookback_seconds`` the window is used as given; otherwise the default
        window is pulled back to cover alarm conditions already active at its start.
        """

        alarm = self.describe_alarm(alarm_name)
        end_time = utc(now) if now is not None else _dt.datetime.now(_dt.timezone.utc)
        period = alarm.get("Period")
        window = default_window(end_time, period, alarm.get("EvaluationPeriods"), lookback_seconds)

        transitions = normalize_history(self.alarm_history(alarm_name, window.start_time))
        if not lookback_seconds:
            window = resolve_window(window, transitions, period)
        LOGGER.debug(
            "alarm %s: %d transitions, window %s - %s",
            alarm_name,
            len(transitions),
            window.start_time,
            window.end_time,
        )

        options = self.metric_graph_options(
            metric_name=alarm["MetricName"],
            namespace=alarm["Namespace"],
            statistic=alarm["Statistic"],
            start_time=window.start_time,
            end_time=window.end_time,
            period=period or WINDOW_POLICY.default_period_seconds,
            dimensions=alarm.get("Dimensions"),
            threshold=alarm.get("Threshold"),
            threshold_comparison=parse_comparison(alarm.get("ComparisonOperator")),
        )
        options.transitions = transitions
        options.title = f"{alarm_name} - {options.title}"
        options.window = window
        return options
