from __future__ import annotations

import datetime as dt
import math

from alert_chart.model import GAP, AlarmState, OverlayPoint, Sample, StateTransition, Window
from alert_chart.timeline import Anchor, synthesize_overlay, synthesize_overlays

T = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
HOUR = dt.timedelta(hours=1)
MS = dt.timedelta(milliseconds=1)


def _transition(hours: float, old: AlarmState, new: AlarmState, begin_hours: float | None = None) -> StateTransition:
    return StateTransition(
        time=T + dt.timedelta(hours=hours),
        old_state=old,
        new_state=new,
        begin_time=T + dt.timedelta(hours=begin_hours) if begin_hours is not None else None,
    )


def _assert_well_formed(points: list[OverlayPoint]) -> None:
    assert len(points) >= 2
    xs = [point.x for point in points]
    assert xs == sorted(xs)


def test_alarm_interval_inside_window() -> None:
    transitions = [
        _transition(2, AlarmState.OK, AlarmState.ALARM),
        _transition(4, AlarmState.ALARM, AlarmState.OK),
    ]

    points = synthesize_overlay(transitions, T, T + 6 * HOUR, Anchor.NOTIFICATION)

    assert points == [
        OverlayPoint(T, GAP),
        OverlayPoint(T + 2 * HOUR, 1),
        OverlayPoint(T + 4 * HOUR - MS, 1),
        OverlayPoint(T + 4 * HOUR, GAP),
        OverlayPoint(T + 6 * HOUR, GAP),
    ]


def test_no_transitions_produce_no_overlay() -> None:
    series = synthesize_overlays([], Window(T, T + HOUR))

    assert series.notification == []
    assert series.actual == []


def test_alarm_active_before_window_seeds_filled() -> None:
    transitions = [_transition(-1, AlarmState.OK, AlarmState.ALARM)]

    points = synthesize_overlay(transitions, T, T + HOUR)

    assert points == [OverlayPoint(T, 1), OverlayPoint(T + HOUR, 1)]


def test_recovery_before_window_seeds_gap() -> None:
    transitions = [
        _transition(-3, AlarmState.OK, AlarmState.ALARM),
        _transition(-2, AlarmState.ALARM, AlarmState.OK),
    ]

    points = synthesize_overlay(transitions, T, T + HOUR)

    assert points == [OverlayPoint(T, GAP), OverlayPoint(T + HOUR, GAP)]


def test_actual_series_is_anchored_on_onset() -> None:
    transitions = [
        _transition(2, AlarmState.OK, AlarmState.ALARM, begin_hours=1),
        _transition(4, AlarmState.ALARM, AlarmState.OK, begin_hours=3.5),
    ]

    series = synthesize_overlays(transitions, Window(T, T + 6 * HOUR))

    assert [point.x for point in series.notification if point.y == 1] == [T + 2 * HOUR, T + 4 * HOUR - MS]
    assert [point.x for point in series.actual if point.y == 1] == [T + HOUR, T + 3.5 * HOUR - MS]
    assert series.actual[-2] == OverlayPoint(T + 3.5 * HOUR, GAP)


def test_onset_before_window_only_affects_seed() -> None:
    transitions = [_transition(1, AlarmState.OK, AlarmState.ALARM, begin_hours=-2)]

    series = synthesize_overlays(transitions, Window(T, T + 2 * HOUR))

    assert series.notification == [OverlayPoint(T, GAP), OverlayPoint(T + HOUR, 1), OverlayPoint(T + 2 * HOUR, 1)]
    assert series.actual == [OverlayPoint(T, 1), OverlayPoint(T + 2 * HOUR, 1)]


def test_insufficient_data_neither_opens_nor_closes_fill() -> None:
    transitions = [
        _transition(1, AlarmState.OK, AlarmState.INSUFFICIENT_DATA),
        _transition(2, AlarmState.INSUFFICIENT_DATA, AlarmState.OK),
    ]

    points = synthesize_overlay(transitions, T, T + 3 * HOUR)

    assert points == [OverlayPoint(T, GAP), OverlayPoint(T + 3 * HOUR, GAP)]


def test_recovery_after_insufficient_data_does_not_close_fill() -> None:
    transitions = [
        _transition(1, AlarmState.OK, AlarmState.ALARM),
        _transition(2, AlarmState.ALARM, AlarmState.INSUFFICIENT_DATA),
        _transition(3, AlarmState.INSUFFICIENT_DATA, AlarmState.OK),
    ]

    points = synthesize_overlay(transitions, T, T + 4 * HOUR)

    assert points == [OverlayPoint(T, GAP), OverlayPoint(T + HOUR, 1), OverlayPoint(T + 4 * HOUR, GAP)]


def test_never_alarming_history_is_all_gaps() -> None:
    transitions = [
        _transition(0.5, AlarmState.INSUFFICIENT_DATA, AlarmState.OK),
        _transition(1, AlarmState.OK, AlarmState.INSUFFICIENT_DATA),
        _transition(1.5, AlarmState.INSUFFICIENT_DATA, AlarmState.OK, begin_hours=1.2),
    ]

    series = synthesize_overlays(transitions, Window(T, T + 2 * HOUR))

    for points in (series.notification, series.actual):
        _assert_well_formed(points)
        assert all(point.is_gap for point in points)
        assert all(math.isnan(point.plot_value()) for point in points)


def test_points_stay_ordered_with_out_of_order_onsets_and_instant_recovery() -> None:
    transitions = [
        _transition(1, AlarmState.OK, AlarmState.ALARM, begin_hours=0.9),
        _transition(1, AlarmState.ALARM, AlarmState.OK, begin_hours=0.9),
        _transition(2, AlarmState.OK, AlarmState.ALARM, begin_hours=2.5),
        _transition(3, AlarmState.ALARM, AlarmState.OK, begin_hours=2.2),
    ]

    series = synthesize_overlays(transitions, Window(T, T + 4 * HOUR))

    _assert_well_formed(series.notification)
    _assert_well_formed(series.actual)


def test_transitions_after_window_end_are_ignored() -> None:
    transitions = [
        _transition(1, AlarmState.OK, AlarmState.ALARM),
        _transition(5, AlarmState.ALARM, AlarmState.OK),
    ]

    points = synthesize_overlay(transitions, T, T + 2 * HOUR)

    assert points == [OverlayPoint(T, GAP), OverlayPoint(T + HOUR, 1), OverlayPoint(T + 2 * HOUR, 1)]


def test_missing_window_falls_back_to_sample_range() -> None:
    samples = [Sample(T + HOUR, 1.0), Sample(T + 3 * HOUR, 2.0)]
    transitions = [_transition(2, AlarmState.OK, AlarmState.ALARM)]

    series = synthesize_overlays(transitions, None, samples)

    assert series.notification[0] == OverlayPoint(T + HOUR, GAP)
    assert series.notification[-1] == OverlayPoint(T + 3 * HOUR, 1)


def test_missing_window_and_samples_falls_back_to_transitions() -> None:
    transitions = [
        _transition(1, AlarmState.OK, AlarmState.ALARM, begin_hours=0.5),
        _transition(2, AlarmState.ALARM, AlarmState.OK),
    ]

    series = synthesize_overlays(transitions, None)

    assert series.actual[0] == OverlayPoint(T + 0.5 * HOUR, GAP)
    assert series.notification[-1] == OverlayPoint(T + 2 * HOUR, GAP)


def test_synthesis_is_repeatable() -> None:
    transitions = [
        _transition(2, AlarmState.OK, AlarmState.ALARM, begin_hours=1),
        _transition(4, AlarmState.ALARM, AlarmState.OK),
    ]
    window = Window(T, T + 6 * HOUR)

    assert synthesize_overlays(transitions, window) == synthesize_overlays(transitions, window)
