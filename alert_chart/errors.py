from __future__ import annotations


class AlertChartError(RuntimeError):
    pass


class AlarmNotFoundError(AlertChartError):
    def __init__(self, alarm_name: str, region: str | None) -> None:
        super().__init__(f"Alarm name {alarm_name} not found in region {region or '<default>'}")
        self.alarm_name = alarm_name
        self.region = region


class IncompleteAlarmError(AlertChartError):
    def __init__(self, alarm_name: str, missing: list[str]) -> None:
        super().__init__(f"Alarm {alarm_name} is missing {', '.join(missing)}")
        self.alarm_name = alarm_name
        self.missing = list(missing)


class MalformedHistoryError(AlertChartError):
    pass


class ConfigError(AlertChartError):
    pass
