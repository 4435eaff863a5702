from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from alert_chart.errors import ConfigError
from alert_chart.settings import AXIS_POLICY, DEFAULT_CHART_SETTINGS, WINDOW_POLICY, load_settings


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_policies_match_documented_defaults() -> None:
    assert WINDOW_POLICY.ideal_data_points == 100
    assert WINDOW_POLICY.max_backfill_samples == 1440
    assert WINDOW_POLICY.default_period_seconds == 300
    assert AXIS_POLICY.threshold_margin == 0.1
    assert (DEFAULT_CHART_SETTINGS.width, DEFAULT_CHART_SETTINGS.height) == (800, 480)


def test_load_settings_reads_chart_section(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "chart.yaml",
        """
        chart:
          width: 640
          timezone: Australia/Sydney
          alarm_alpha: 0.5
        """,
    )

    settings = load_settings(path)

    assert settings.width == 640
    assert settings.height == DEFAULT_CHART_SETTINGS.height
    assert settings.timezone == "Australia/Sydney"
    assert settings.alarm_alpha == 0.5


def test_load_settings_accepts_flat_mapping_and_empty_file(tmp_path: Path) -> None:
    assert load_settings(_write(tmp_path / "flat.yaml", "height: 300\n")).height == 300
    assert load_settings(_write(tmp_path / "empty.yaml", "")) == DEFAULT_CHART_SETTINGS


def test_load_settings_rejects_unknown_keys(tmp_path: Path) -> None:
    path = _write(tmp_path / "chart.yaml", "chart:\n  colour: red\n")

    with pytest.raises(ConfigError, match="colour"):
        load_settings(path)


def test_load_settings_rejects_bad_values(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path / "chart.yaml", "chart:\n  width: wide\n"))
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path / "list.yaml", "- 1\n- 2\n"))


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.yaml")


def test_load_settings_rejects_unknown_timezone(tmp_path: Path) -> None:
    path = _write(tmp_path / "chart.yaml", "chart:\n  timezone: Not/AZone\n")

    with pytest.raises(ConfigError, match="timezone"):
        load_settings(path)


def test_load_settings_rejects_fractional_and_boolean_integers(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="width"):
        load_settings(_write(tmp_path / "float.yaml", "chart:\n  width: 800.7\n"))
    with pytest.raises(ConfigError, match="dpi"):
        load_settings(_write(tmp_path / "bool.yaml", "chart:\n  dpi: yes\n"))


def test_load_settings_widens_integers_for_float_fields(tmp_path: Path) -> None:
    settings = load_settings(_write(tmp_path / "chart.yaml", "chart:\n  alarm_alpha: 1\n"))

    assert settings.alarm_alpha == 1.0
    assert isinstance(settings.alarm_alpha, float)


def test_load_settings_rejects_tooltip_format(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="tooltip_format"):
        load_settings(_write(tmp_path / "chart.yaml", "chart:\n  tooltip_format: '%H:%M'\n"))
