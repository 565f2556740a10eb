"""
Monitoring-plugin result accumulator.

A `MonitoringResponse` collects status updates and performance-data points
for one check and renders them in the Nagios/Icinga plugin convention:

    OK: message | 'traffic_counter_in_Gi0/1'=1000B;;;; ...

The worst status ever set wins; exit codes are OK=0, WARNING=1,
CRITICAL=2, UNKNOWN=3.
"""

from enum import IntEnum
from typing import List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ValidationError, field_validator

VALID_UNITS = ("", "s", "ms", "us", "%", "B", "KB", "MB", "GB", "TB", "c")


class PerformanceDataError(Exception):
    """Raised when a performance-data point is invalid or a duplicate."""


class Status(IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class PerformanceDataPoint(BaseModel):
    """One `(metric, value, unit, label)` tuple."""

    metric: str
    value: Union[int, float]
    unit: str = ""
    label: str = ""

    @field_validator("metric")
    @classmethod
    def check_metric(cls, v: str) -> str:
        if not v:
            raise ValueError("metric must not be empty")
        if "'" in v or "=" in v:
            raise ValueError("metric must not contain ' or =")
        return v

    @field_validator("label")
    @classmethod
    def check_label(cls, v: str) -> str:
        if "'" in v or "=" in v:
            raise ValueError("label must not contain ' or =")
        return v

    @field_validator("unit")
    @classmethod
    def check_unit(cls, v: str) -> str:
        if v not in VALID_UNITS:
            raise ValueError(f"invalid unit {v!r}")
        return v

    @classmethod
    def create(cls, metric: str, value: Union[int, float], unit: str = "", label: str = "") -> "PerformanceDataPoint":
        """Like the constructor, but raises PerformanceDataError instead of ValidationError."""
        try:
            return cls(metric=metric, value=value, unit=unit, label=label)
        except ValidationError as exc:
            raise PerformanceDataError(f"invalid performance data point {metric!r}: {exc}") from exc

    def key(self) -> Tuple[str, str]:
        return self.metric, self.label

    def render(self) -> str:
        name = f"{self.metric}_{self.label}" if self.label else self.metric
        return f"'{name}'={self.value}{self.unit};;;;"


class OutputInfo(BaseModel):
    """Snapshot of a MonitoringResponse."""

    raw_output: str
    status_code: int
    performance_data: List[PerformanceDataPoint]


class MonitoringResponse:
    """
    Accumulates the result of one check.

    Status messages are kept together with their level; the output shows
    the messages of the final (worst) level only.
    """

    def __init__(self, default_ok_message: str = "check ok"):
        self.default_ok_message = default_ok_message
        self.status = Status.OK
        self.messages: List[Tuple[Status, str]] = []
        self.performance_data: List[PerformanceDataPoint] = []
        self._keys: Set[Tuple[str, str]] = set()
        self._print_performance_data = True

    def update_status(self, status: Status, message: str = "") -> None:
        if status > self.status:
            self.status = status
        if message:
            self.messages.append((status, message))

    def update_status_on_error(
        self,
        exc: Optional[BaseException],
        status: Status,
        message: str,
        exit_on_error: bool,
    ) -> bool:
        """
        Record `exc` (if any) as "<message>: <exc>" at `status`.

        Returns True iff an error was recorded and the caller should stop.
        """
        if exc is None:
            return False
        self.update_status(status, f"{message}: {exc}" if message else str(exc))
        return exit_on_error

    def add_performance_data_point(self, point: PerformanceDataPoint) -> None:
        if point.key() in self._keys:
            raise PerformanceDataError(
                f"performance data point with metric {point.metric!r} and label {point.label!r} already exists"
            )
        self._keys.add(point.key())
        self.performance_data.append(point)

    def print_performance_data(self, enabled: bool) -> None:
        self._print_performance_data = enabled

    def get_status_code(self) -> int:
        return int(self.status)

    def get_output(self) -> str:
        messages = [msg for status, msg in self.messages if status == self.status]
        if messages:
            text = "; ".join(messages)
        elif self.status == Status.OK:
            text = self.default_ok_message
        else:
            text = "check failed"
        output = f"{self.status.name}: {text}"

        if self._print_performance_data and self.performance_data:
            output += " | " + " ".join(p.render() for p in self.performance_data)
        return output

    def get_info(self) -> OutputInfo:
        return OutputInfo(
            raw_output=self.get_output(),
            status_code=self.get_status_code(),
            performance_data=list(self.performance_data) if self._print_performance_data else [],
        )
