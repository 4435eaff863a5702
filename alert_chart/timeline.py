"""Turn alarm state transitions into step series for area-fill plotting.

Renderers interpolate linearly between points, so every alarm interval is
closed by a filled point one millisecond before the recovery followed by a gap
point at the recovery itself. Gaps use the ``GAP`` sentinel rather than zero so
inactive stretches render as holes instead of a dip to the baseline.
"""

from __future__ import annotations

import datetime as _dt
import enum
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from alert_chart.model import GAP, AlarmState, OverlayPoint, OverlayValue, Sample, StateTransition, Window

CLOSE_OFFSET = _dt.timedelta(milliseconds=1)


class Anchor(enum.Enum):
    NOTIFICATION = "notification"
    ONSET = "onset"

    def time_of(self, transition: StateTransition) -> _dt.datetime:
        if self is Anchor.ONSET:
            return transition.onset
        return transition.time


@dataclass(frozen=True)
class OverlaySeries:
    notification: List[OverlayPoint]
    actual: List[OverlayPoint]


def _level(state: AlarmState) -> OverlayValue:
    return 1 if state is AlarmState.ALARM else GAP


def synthesize_overlay(
    transitions: Sequence[StateTransition],
    window_start: _dt.datetime,
    window_end: _dt.datetime,
    anchor: Anchor = Anchor.NOTIFICATION,
) -> List[OverlayPoint]:
    if not transitions:
        return []
    if window_start > window_end:
        raise ValueError(f"window start {window_start} is after end {window_end}")

    anchored: List[Tuple[_dt.datetime, StateTransition]] = sorted(
        ((anchor.time_of(transition), transition) for transition in transitions),
        key=lambda item: item[0],
    )

    last_state = AlarmState.OK
    index = 0
    while index < len(anchored) and anchored[index][0] < window_start:
        last_state = anchored[index][1].new_state
        index += 1

    points = [OverlayPoint(window_start, _level(last_state))]
    for at, transition in anchored[index:]:
        if at > window_end:
            break
        if transition.new_state is AlarmState.ALARM:
            points.append(OverlayPoint(at, 1))
        elif transition.new_state is AlarmState.OK and last_state is AlarmState.ALARM:
            points.append(OverlayPoint(max(at - CLOSE_OFFSET, points[-1].x), 1))
            points.append(OverlayPoint(at, GAP))
        last_state = transition.new_state

    points.append(OverlayPoint(window_end, _level(last_state)))
    return points


def overlay_bounds(
    window: Optional[Window],
    samples: Sequence[Sample],
    transitions: Sequence[StateTransition],
) -> Tuple[Optional[_dt.datetime], Optional[_dt.datetime]]:
    """Window bounds, falling back to the sample range and then the transition range."""

    if window is not None:
        return window.start_time, window.end_time
    if samples:
        return samples[0].time, samples[-1].time
    if transitions:
        anchors = [transition.time for transition in transitions] + [transition.onset for transition in transitions]
        return min(anchors), max(anchors)
    return None, None


def synthesize_overlays(
    transitions: Sequence[StateTransition],
    window: Optional[Window],
    samples: Sequence[Sample] = (),
) -> OverlaySeries:
    start, end = overlay_bounds(window, samples, transitions)
    if not transitions or start is None or end is None:
        return OverlaySeries(notification=[], actual=[])
    return OverlaySeries(
        notification=synthesize_overlay(transitions, start, end, Anchor.NOTIFICATION),
        actual=synthesize_overlay(transitions, start, end, Anchor.ONSET),
    )
