from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AdminOverwrite, AttendanceRecord, TimeInUpdate, TimeOutUpdate


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def apply_time_in(self, update: TimeInUpdate) -> None:
        """Create the record, or set ``time_in`` on an existing one."""

        raise NotImplementedError

    def apply_time_out(self, update: TimeOutUpdate) -> bool:
        """Set ``time_out`` and metrics only while ``time_out`` is still unset.

        Returns False when another punch-out got there first.
        """

        raise NotImplementedError

    def admin_overwrite(self, update: AdminOverwrite) -> None:
        """Admin-only override, creates the record when missing."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
