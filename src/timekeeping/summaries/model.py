from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..metrics.model import DailyMetrics


@dataclass(frozen=True)
class DailySummary:
    """Organization-wide totals for one calendar date."""

    work_date: date
    total_regular: float = 0.0
    total_overtime: float = 0.0
    total_night_diff: float = 0.0
    total_late: float = 0.0
    total_undertime: float = 0.0
    total_employees: int = 0


@dataclass(frozen=True)
class EmployeeDailyBreakdown:
    """One employee's contribution to a daily summary (replaced, never summed)."""

    work_date: date
    employee_id: str
    display_name: str
    metrics: DailyMetrics
    recorded_at: datetime
