"""Decide how far back an alarm chart has to reach.

The default lookback aims for roughly one hundred samples (or twice the alarm's
evaluation span when that span is long). Alarm history can then pull the start
further back so an alarm that was already active is not cut off at the left
edge of the chart.
"""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from functools import reduce
from typing import Optional, Sequence

from alert_chart.model import AlarmState, StateTransition, Window
from alert_chart.settings import WINDOW_POLICY

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Scan:
    start_time: _dt.datetime
    prior_state: Optional[AlarmState]


def default_lookback_seconds(period: Optional[int], evaluation_periods: Optional[int] = None) -> int:
    day = WINDOW_POLICY.day_seconds
    if not period:
        return day
    if evaluation_periods and period * evaluation_periods * WINDOW_POLICY.evaluation_span_multiplier > day:
        return period * evaluation_periods * WINDOW_POLICY.evaluation_span_lookback
    if period * WINDOW_POLICY.ideal_data_points < day:
        return period * WINDOW_POLICY.ideal_data_points
    return day


def default_window(
    end_time: _dt.datetime,
    period: Optional[int],
    evaluation_periods: Optional[int] = None,
    lookback_seconds: Optional[int] = None,
) -> Window:
    """Window ending at ``end_time``; an explicit lookback skips the heuristic."""

    if lookback_seconds:
        timespan = lookback_seconds
    else:
        timespan = default_lookback_seconds(period, evaluation_periods)
    return Window(start_time=end_time - _dt.timedelta(seconds=timespan), end_time=end_time)


def _within_backfill_bound(onset: _dt.datetime, end_time: _dt.datetime, period: int) -> bool:
    samples = (end_time - onset).total_seconds() / period
    return samples <= WINDOW_POLICY.max_backfill_samples


def _candidate_onset(scan: _Scan, transition: StateTransition) -> Optional[_dt.datetime]:
    prior_state = scan.prior_state if scan.prior_state is not None else transition.old_state
    prior_onset = transition.prior_begin_time
    if prior_state is AlarmState.ALARM and prior_onset is not None and prior_onset < scan.start_time:
        return prior_onset
    if transition.begin_time is not None and transition.begin_time < scan.start_time:
        return transition.begin_time
    return None


def resolve_window(
    window: Window,
    transitions: Sequence[StateTransition],
    period: Optional[int] = None,
) -> Window:
    """Extend ``window`` backwards to the earliest alarm onset the history reveals.

    Transitions are folded in order, so an extension made by one transition is
    the baseline the next one is compared against. Onsets that would need more
    than ``WINDOW_POLICY.max_backfill_samples`` samples are ignored. The result
    never starts later than ``window``.
    """

    step = period or WINDOW_POLICY.default_period_seconds

    def fold(scan: _Scan, transition: StateTransition) -> _Scan:
        onset = _candidate_onset(scan, transition)
        start_time = scan.start_time
        if onset is not None:
            if _within_backfill_bound(onset, window.end_time, step):
                LOGGER.debug("extending window start from %s to %s", start_time, onset)
                start_time = onset
            else:
                LOGGER.debug("ignoring onset %s beyond backfill bound", onset)
        return _Scan(start_time=start_time, prior_state=transition.new_state)

    scan = reduce(fold, transitions, _Scan(start_time=window.start_time, prior_state=None))
    return Window(start_time=scan.start_time, end_time=window.end_time)
