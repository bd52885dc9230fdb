from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Optional

from ..core.constants import DEFAULT_REGULAR_CAP_HOURS, DEFAULT_SHIFT_END, DEFAULT_SHIFT_START


@dataclass(frozen=True)
class ShiftSchedule:
    """Nominal working hours of an employee."""

    start_time: time = DEFAULT_SHIFT_START
    end_time: time = DEFAULT_SHIFT_END
    regular_cap_hours: float = DEFAULT_REGULAR_CAP_HOURS


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee profile.

    Read-only to the timekeeping core; onboarding owns it.
    """

    employee_id: str
    display_name: str
    email: Optional[str] = None
    schedule: ShiftSchedule = field(default_factory=ShiftSchedule)
