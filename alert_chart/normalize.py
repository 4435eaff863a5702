from __future__ import annotations

import datetime as _dt
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from alert_chart.errors import MalformedHistoryError
from alert_chart.model import AlarmState, Comparison, StateTransition, utc

_STATE_VALUES: Dict[str, AlarmState] = {
    "OK": AlarmState.OK,
    "ALARM": AlarmState.ALARM,
    "INSUFFICIENT_DATA": AlarmState.INSUFFICIENT_DATA,
}

_COMPARISON_NAMES: Dict[str, Comparison] = {
    "GreaterThanThreshold": Comparison.GT,
    "GreaterThanOrEqualToThreshold": Comparison.GTE,
    "LessThanThreshold": Comparison.LT,
    "LessThanOrEqualToThreshold": Comparison.LTE,
}

_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)

HistoryRecord = Tuple[_dt.datetime, Union[str, Mapping[str, Any]]]


def parse_state(value: str) -> AlarmState:
    try:
        return _STATE_VALUES[value]
    except (KeyError, TypeError):
        raise MalformedHistoryError(f"unknown alarm state value {value!r}") from None


def parse_comparison(name: Optional[str]) -> Optional[Comparison]:
    """Map a provider comparator (or a short ``gt``/``lte`` name) to a comparison.

    Unknown or absent names mean "no directional comparison" and return ``None``.
    """

    if not name:
        return None
    if name in _COMPARISON_NAMES:
        return _COMPARISON_NAMES[name]
    try:
        return Comparison(name)
    except ValueError:
        return None


def parse_timestamp(raw: str) -> _dt.datetime:
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return utc(_dt.datetime.strptime(raw, fmt))
        except ValueError:
            continue
    try:
        return utc(_dt.datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        raise MalformedHistoryError(f"invalid timestamp {raw!r}") from None


def _decode(history_data: Union[str, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(history_data, Mapping):
        return history_data
    try:
        data = json.loads(history_data or "{}")
    except json.JSONDecodeError as exc:
        raise MalformedHistoryError(f"history data is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedHistoryError("history data must encode a JSON object")
    return data


def _state_block(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    block = data.get(key)
    if not isinstance(block, Mapping):
        raise MalformedHistoryError(f"history data missing {key}")
    return block


def _start_date(block: Mapping[str, Any]) -> Optional[_dt.datetime]:
    reason = block.get("stateReasonData")
    if not isinstance(reason, Mapping):
        return None
    start = reason.get("startDate")
    if not start:
        return None
    return parse_timestamp(str(start))


def normalize_history_record(timestamp: _dt.datetime, history_data: Union[str, Mapping[str, Any]]) -> StateTransition:
    data = _decode(history_data)
    old_block = _state_block(data, "oldState")
    new_block = _state_block(data, "newState")
    return StateTransition(
        time=utc(timestamp),
        old_state=parse_state(old_block.get("stateValue")),
        new_state=parse_state(new_block.get("stateValue")),
        begin_time=_start_date(new_block),
        prior_begin_time=_start_date(old_block),
    )


def normalize_history(records: Iterable[HistoryRecord]) -> List[StateTransition]:
    transitions = [normalize_history_record(timestamp, data) for timestamp, data in records]
    return sorted(transitions, key=lambda transition: transition.time)
