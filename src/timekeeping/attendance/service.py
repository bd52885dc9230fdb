from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import (
    AggregationPendingError,
    AlreadyPunchedIn,
    AlreadyPunchedOut,
    InvalidInterval,
    NotPunchedIn,
    StorageError,
    ValidationError,
)
from ..employees.model import Employee, ShiftSchedule
from ..employees.repository import EmployeeRepository
from ..metrics.model import DailyMetrics
from ..metrics.night_differential import NightDifferentialCalculator
from ..metrics.shift_metrics import ShiftMetricsCalculator
from ..summaries.aggregator import DailyAggregator
from ..summaries.model import DailySummary
from .model import AdminOverwrite, AttendanceRecord, TimeInUpdate, TimeOutUpdate
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _with_metrics(record: AttendanceRecord, metrics: DailyMetrics) -> AttendanceRecord:
    return replace(
        record,
        regular_hours=metrics.regular_hours,
        overtime_hours=metrics.overtime_hours,
        late_minutes=metrics.late_minutes,
        undertime_minutes=metrics.undertime_minutes,
        night_differential_hours=metrics.night_differential_hours,
    )


class PunchRecorder:
    """Validates punches, derives metrics on punch-out and feeds the daily summary.

    A punch-out is two writes: the attendance record, then the date's summary.
    If the second fails the first stays, and ``AggregationPendingError`` tells
    the caller to run ``retry_aggregation`` rather than punch out again.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        aggregator: DailyAggregator,
        *,
        shift_calculator: ShiftMetricsCalculator | None = None,
        night_calculator: NightDifferentialCalculator | None = None,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._aggregator = aggregator
        self._shift_calculator = shift_calculator or ShiftMetricsCalculator()
        self._night_calculator = night_calculator or NightDifferentialCalculator()
        self._clock = clock or SystemClock()

    def _require_employee(self, employee_id: str) -> Employee:
        employee_id = require_non_empty(employee_id, "employee_id")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise ValidationError(f"Unknown employee: {employee_id}")
        return employee

    def compute_metrics(self, time_in: datetime, time_out: datetime, schedule: ShiftSchedule) -> DailyMetrics:
        shift = self._shift_calculator.metrics(time_in, time_out, schedule)
        night = self._night_calculator.night_differential_hours(time_in, time_out)
        return DailyMetrics.combine(shift, night)

    def record_time_in(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        employee = self._require_employee(employee_id)
        now = now or self._clock.now()
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing and existing.time_in is not None:
            raise AlreadyPunchedIn("You have already timed in today")
        if self._carried_over_record(employee, now) is not None:
            raise AlreadyPunchedIn("Your shift from yesterday is still open")

        self._attendance.apply_time_in(TimeInUpdate(employee_id=employee.employee_id, work_date=today, time_in=now))
        logger.info("time in: employee=%s date=%s at=%s", employee.employee_id, today, now.isoformat())
        if existing:
            return replace(existing, time_in=now)
        return AttendanceRecord(employee_id=employee.employee_id, work_date=today, time_in=now)

    def _carried_over_record(self, employee: Employee, now: datetime) -> Optional[AttendanceRecord]:
        """Yesterday's open record, while it can still be an overnight shift in progress.

        A punch-in older than the scheduled shift length plus the regular cap
        is a forgotten punch-out and is left alone.
        """

        previous = self._attendance.get_for_employee_and_date(employee.employee_id, now.date() - timedelta(days=1))
        if previous is None or not previous.is_open:
            return None
        limit = timedelta(hours=self._shift_calculator.max_open_hours(employee.schedule))
        if now - previous.time_in > limit:
            return None
        return previous

    def _find_open_record(self, employee: Employee, now: datetime) -> Optional[AttendanceRecord]:
        record = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        if record and record.time_in is not None:
            return record
        return self._carried_over_record(employee, now)

    def record_time_out(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        employee = self._require_employee(employee_id)
        now = now or self._clock.now()

        record = self._find_open_record(employee, now)
        if record is None:
            raise NotPunchedIn("Please time in first")
        if record.time_out is not None:
            raise AlreadyPunchedOut("You have already timed out today")
        if now <= record.time_in:
            raise InvalidInterval(f"time out {now.isoformat()} must be after time in {record.time_in.isoformat()}")

        metrics = self.compute_metrics(record.time_in, now, employee.schedule)
        update = TimeOutUpdate(employee_id=employee.employee_id, work_date=record.work_date, time_out=now, metrics=metrics)
        if not self._attendance.apply_time_out(update):
            raise AlreadyPunchedOut("You have already timed out today")
        logger.info("time out: employee=%s date=%s at=%s", employee.employee_id, record.work_date, now.isoformat())

        self._aggregate(employee, record.work_date, metrics)
        return _with_metrics(replace(record, time_out=now), metrics)

    def retry_aggregation(self, employee_id: str, work_date: date) -> DailySummary:
        """Re-apply a persisted punch-out to its daily summary.

        Safe to repeat: a contribution already counted is not counted again.
        """

        employee = self._require_employee(employee_id)
        record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if record is None or not record.is_finalized:
            raise NotPunchedIn(f"No finished attendance for {employee.employee_id} on {work_date.isoformat()}")
        return self._aggregate(employee, work_date, record.metrics())

    def admin_overwrite(
        self,
        employee_id: str,
        work_date: date,
        *,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
    ) -> AttendanceRecord:
        employee = self._require_employee(employee_id)
        if time_in is None or time_out is None:
            raise ValidationError("Both time in and time out are required")
        if time_out <= time_in:
            raise InvalidInterval(f"time out {time_out.isoformat()} must be after time in {time_in.isoformat()}")

        metrics = self.compute_metrics(time_in, time_out, employee.schedule)
        self._attendance.admin_overwrite(
            AdminOverwrite(
                employee_id=employee.employee_id,
                work_date=work_date,
                time_in=time_in,
                time_out=time_out,
                metrics=metrics,
            )
        )
        logger.warning("attendance overwritten by admin: employee=%s date=%s", employee.employee_id, work_date)

        self._aggregate(employee, work_date, metrics)
        record = AttendanceRecord(employee_id=employee.employee_id, work_date=work_date, time_in=time_in, time_out=time_out)
        return _with_metrics(record, metrics)

    def _aggregate(self, employee: Employee, work_date: date, metrics: DailyMetrics) -> DailySummary:
        try:
            return self._aggregator.apply(work_date, employee.employee_id, metrics, employee.display_name)
        except StorageError as exc:
            logger.error(
                "daily summary update failed: employee=%s date=%s: %s", employee.employee_id, work_date, exc
            )
            raise AggregationPendingError(
                "Time out saved but the daily summary was not updated",
                employee_id=employee.employee_id,
                work_date=work_date,
            ) from exc

    def history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        employee_id = require_non_empty(employee_id, "employee_id")
        rows = self._attendance.list_for_employee(employee_id, limit)
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def records_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_date(work_date)
