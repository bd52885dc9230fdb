from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import AdminOverwrite, AttendanceRecord, TimeInUpdate, TimeOutUpdate
from .repository import AttendanceRepository

_COLUMNS = """
    employee_id, work_date, time_in, time_out,
    regular_hours, overtime_hours, late_minutes, undertime_minutes, night_diff_hours
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        employee_id=r["employee_id"],
        work_date=r["work_date"],
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        regular_hours=as_float(r.get("regular_hours")),
        overtime_hours=as_float(r.get("overtime_hours")),
        late_minutes=as_float(r.get("late_minutes")),
        undertime_minutes=as_float(r.get("undertime_minutes")),
        night_differential_hours=as_float(r.get("night_diff_hours")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def apply_time_in(self, update: TimeInUpdate) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, time_in)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE time_in=VALUES(time_in)
                """,
                (update.employee_id, update.work_date, update.time_in),
            )

    def apply_time_out(self, update: TimeOutUpdate) -> bool:
        m = update.metrics
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_out=%s, regular_hours=%s, overtime_hours=%s,
                    late_minutes=%s, undertime_minutes=%s, night_diff_hours=%s
                WHERE employee_id=%s AND work_date=%s AND time_out IS NULL
                """,
                (
                    update.time_out,
                    m.regular_hours,
                    m.overtime_hours,
                    m.late_minutes,
                    m.undertime_minutes,
                    m.night_differential_hours,
                    update.employee_id,
                    update.work_date,
                ),
            )
            return cur.rowcount > 0

    def admin_overwrite(self, update: AdminOverwrite) -> None:
        m = update.metrics
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, time_in, time_out,
                    regular_hours, overtime_hours, late_minutes, undertime_minutes, night_diff_hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    time_in=VALUES(time_in), time_out=VALUES(time_out),
                    regular_hours=VALUES(regular_hours), overtime_hours=VALUES(overtime_hours),
                    late_minutes=VALUES(late_minutes), undertime_minutes=VALUES(undertime_minutes),
                    night_diff_hours=VALUES(night_diff_hours)
                """,
                (
                    update.employee_id,
                    update.work_date,
                    update.time_in,
                    update.time_out,
                    m.regular_hours,
                    m.overtime_hours,
                    m.late_minutes,
                    m.undertime_minutes,
                    m.night_differential_hours,
                ),
            )

    def list_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE work_date=%s ORDER BY employee_id",
                (work_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]
