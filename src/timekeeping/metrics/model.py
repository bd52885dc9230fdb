from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShiftMetrics:
    total_hours: float
    regular_hours: float
    overtime_hours: float
    late_minutes: float
    undertime_minutes: float


@dataclass(frozen=True)
class DailyMetrics:
    """Everything one finalized punch pair contributes to a day."""

    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    late_minutes: float = 0.0
    undertime_minutes: float = 0.0
    night_differential_hours: float = 0.0

    @classmethod
    def combine(cls, shift: ShiftMetrics, night_differential_hours: float) -> "DailyMetrics":
        return cls(
            regular_hours=shift.regular_hours,
            overtime_hours=shift.overtime_hours,
            late_minutes=shift.late_minutes,
            undertime_minutes=shift.undertime_minutes,
            night_differential_hours=night_differential_hours,
        )
