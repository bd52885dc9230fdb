from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from timekeeping.attendance.model import AdminOverwrite, AttendanceRecord, TimeInUpdate, TimeOutUpdate
from timekeeping.common.datetime_utils import FixedClock
from timekeeping.container import wire_services
from timekeeping.core.exceptions import StorageError
from timekeeping.employees.model import Employee, ShiftSchedule
from timekeeping.summaries.model import DailySummary, EmployeeDailyBreakdown


class InMemoryEmployees:
    def __init__(self, employees: list[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)


class InMemoryAttendance:
    def __init__(self):
        self._by_key: dict[tuple[str, date], AttendanceRecord] = {}
        self.writes: list[object] = []
        self.fail_next_write = False

    def _check_failure(self) -> None:
        if self.fail_next_write:
            self.fail_next_write = False
            raise StorageError("attendance store unavailable")

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_key.get((employee_id, work_date))

    def apply_time_in(self, update: TimeInUpdate) -> None:
        self._check_failure()
        key = (update.employee_id, update.work_date)
        existing = self._by_key.get(key)
        if existing:
            self._by_key[key] = replace(existing, time_in=update.time_in)
        else:
            self._by_key[key] = AttendanceRecord(update.employee_id, update.work_date, time_in=update.time_in)
        self.writes.append(update)

    def apply_time_out(self, update: TimeOutUpdate) -> bool:
        self._check_failure()
        key = (update.employee_id, update.work_date)
        existing = self._by_key.get(key)
        if existing is None or existing.time_out is not None:
            return False
        m = update.metrics
        self._by_key[key] = replace(
            existing,
            time_out=update.time_out,
            regular_hours=m.regular_hours,
            overtime_hours=m.overtime_hours,
            late_minutes=m.late_minutes,
            undertime_minutes=m.undertime_minutes,
            night_differential_hours=m.night_differential_hours,
        )
        self.writes.append(update)
        return True

    def admin_overwrite(self, update: AdminOverwrite) -> None:
        self._check_failure()
        m = update.metrics
        self._by_key[(update.employee_id, update.work_date)] = AttendanceRecord(
            employee_id=update.employee_id,
            work_date=update.work_date,
            time_in=update.time_in,
            time_out=update.time_out,
            regular_hours=m.regular_hours,
            overtime_hours=m.overtime_hours,
            late_minutes=m.late_minutes,
            undertime_minutes=m.undertime_minutes,
            night_differential_hours=m.night_differential_hours,
        )
        self.writes.append(update)

    def list_for_employee(self, employee_id: str, limit: int):
        items = [r for r in self._by_key.values() if r.employee_id == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def list_for_date(self, work_date: date):
        return sorted((r for r in self._by_key.values() if r.work_date == work_date), key=lambda r: r.employee_id)


class InMemorySummaries:
    def __init__(self):
        self._summaries: dict[date, DailySummary] = {}
        self._breakdowns: dict[tuple[date, str], EmployeeDailyBreakdown] = {}
        self._locks: dict[date, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self.fail_next_apply = False

    def _lock_for(self, work_date: date) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(work_date, threading.Lock())

    def get_summary(self, work_date: date) -> Optional[DailySummary]:
        return self._summaries.get(work_date)

    def list_summaries(self):
        return list(self._summaries.values())

    def list_breakdowns(self, work_date: date):
        return [b for (d, _), b in self._breakdowns.items() if d == work_date]

    def get_breakdown(self, work_date: date, employee_id: str) -> Optional[EmployeeDailyBreakdown]:
        return self._breakdowns.get((work_date, employee_id))

    def put_summary(self, summary: DailySummary) -> None:
        self._summaries[summary.work_date] = summary

    def apply_contribution(self, breakdown, fold):
        if self.fail_next_apply:
            self.fail_next_apply = False
            raise StorageError("summary store unavailable")

        work_date = breakdown.work_date
        with self._lock_for(work_date):
            current = self._summaries.get(work_date) or DailySummary(work_date=work_date)
            prior = self._breakdowns.get((work_date, breakdown.employee_id))
            updated = fold(current, prior, breakdown)
            self._summaries[work_date] = updated
            self._breakdowns[(work_date, breakdown.employee_id)] = breakdown
            return updated


DAY_SCHEDULE = ShiftSchedule(start_time=time(9, 0), end_time=time(18, 0), regular_cap_hours=9)
NIGHT_SCHEDULE = ShiftSchedule(start_time=time(22, 0), end_time=time(6, 0), regular_cap_hours=9)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 8, 45)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(employee_id="emp-a", display_name="Alice", schedule=DAY_SCHEDULE),
            Employee(employee_id="emp-b", display_name="Bob", schedule=DAY_SCHEDULE),
            Employee(employee_id="emp-n", display_name="Nina", schedule=NIGHT_SCHEDULE),
        ]
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def summaries_repo() -> InMemorySummaries:
    return InMemorySummaries()


@pytest.fixture
def container(attendance_repo, employees_repo, summaries_repo, clock):
    return wire_services(
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        summaries_repo=summaries_repo,
        clock=clock,
    )


@pytest.fixture
def recorder(container):
    return container.punch_recorder


@pytest.fixture
def app(container, monkeypatch):
    from timekeeping.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()
