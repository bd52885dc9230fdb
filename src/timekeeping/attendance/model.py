from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..metrics.model import DailyMetrics


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's punches for one calendar date.

    Metric fields are set iff ``time_out`` is set.
    """

    employee_id: str
    work_date: date
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    late_minutes: Optional[float] = None
    undertime_minutes: Optional[float] = None
    night_differential_hours: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.time_in is not None and self.time_out is None

    @property
    def is_finalized(self) -> bool:
        return self.time_out is not None

    def metrics(self) -> Optional[DailyMetrics]:
        if not self.is_finalized:
            return None
        return DailyMetrics(
            regular_hours=self.regular_hours or 0.0,
            overtime_hours=self.overtime_hours or 0.0,
            late_minutes=self.late_minutes or 0.0,
            undertime_minutes=self.undertime_minutes or 0.0,
            night_differential_hours=self.night_differential_hours or 0.0,
        )


# Update types. Each one names exactly the fields its operation may write;
# repositories leave every other column untouched.


@dataclass(frozen=True)
class TimeInUpdate:
    employee_id: str
    work_date: date
    time_in: datetime


@dataclass(frozen=True)
class TimeOutUpdate:
    employee_id: str
    work_date: date
    time_out: datetime
    metrics: DailyMetrics


@dataclass(frozen=True)
class AdminOverwrite:
    employee_id: str
    work_date: date
    time_in: datetime
    time_out: datetime
    metrics: DailyMetrics
