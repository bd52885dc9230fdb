from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from ..metrics.model import DailyMetrics
from .model import DailySummary, EmployeeDailyBreakdown
from .repository import ContributionFold, SummaryRepository

_SUMMARY_COLUMNS = """
    work_date, total_regular, total_overtime, total_night_diff,
    total_late, total_undertime, total_employees
"""

_BREAKDOWN_COLUMNS = """
    work_date, employee_id, display_name, regular_hours, overtime_hours,
    late_minutes, undertime_minutes, night_diff_hours, recorded_at
"""


def _to_summary(r: dict) -> DailySummary:
    return DailySummary(
        work_date=r["work_date"],
        total_regular=as_float(r["total_regular"]),
        total_overtime=as_float(r["total_overtime"]),
        total_night_diff=as_float(r["total_night_diff"]),
        total_late=as_float(r["total_late"]),
        total_undertime=as_float(r["total_undertime"]),
        total_employees=int(r["total_employees"]),
    )


def _to_breakdown(r: dict) -> EmployeeDailyBreakdown:
    return EmployeeDailyBreakdown(
        work_date=r["work_date"],
        employee_id=r["employee_id"],
        display_name=r["display_name"],
        metrics=DailyMetrics(
            regular_hours=as_float(r["regular_hours"]),
            overtime_hours=as_float(r["overtime_hours"]),
            late_minutes=as_float(r["late_minutes"]),
            undertime_minutes=as_float(r["undertime_minutes"]),
            night_differential_hours=as_float(r["night_diff_hours"]),
        ),
        recorded_at=r["recorded_at"],
    )


class MySQLSummaryRepository(SummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_summary(self, work_date: date) -> Optional[DailySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SUMMARY_COLUMNS} FROM daily_summaries WHERE work_date=%s", (work_date,))
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def list_summaries(self) -> Sequence[DailySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SUMMARY_COLUMNS} FROM daily_summaries ORDER BY work_date")
            return [_to_summary(r) for r in fetchall(cur)]

    def list_breakdowns(self, work_date: date) -> Sequence[EmployeeDailyBreakdown]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_BREAKDOWN_COLUMNS} FROM employee_daily_breakdowns WHERE work_date=%s",
                (work_date,),
            )
            return [_to_breakdown(r) for r in fetchall(cur)]

    def apply_contribution(self, breakdown: EmployeeDailyBreakdown, fold: ContributionFold) -> DailySummary:
        work_date = breakdown.work_date
        with db_cursor(self._conn_factory) as (_, cur):
            # The summary row is the per-date lock; create it (zeroed) on first use.
            # ON DUPLICATE KEY UPDATE, not INSERT IGNORE: an existing row must be locked exclusively.
            cur.execute(
                "INSERT INTO daily_summaries(work_date) VALUES(%s) ON DUPLICATE KEY UPDATE work_date=work_date",
                (work_date,),
            )
            cur.execute(
                f"SELECT {_SUMMARY_COLUMNS} FROM daily_summaries WHERE work_date=%s FOR UPDATE",
                (work_date,),
            )
            current = _to_summary(fetchone(cur))

            cur.execute(
                f"""
                SELECT {_BREAKDOWN_COLUMNS}
                FROM employee_daily_breakdowns
                WHERE work_date=%s AND employee_id=%s
                """,
                (work_date, breakdown.employee_id),
            )
            prior_row = fetchone(cur)
            prior = _to_breakdown(prior_row) if prior_row else None

            updated = fold(current, prior, breakdown)

            cur.execute(
                """
                UPDATE daily_summaries
                SET total_regular=%s, total_overtime=%s, total_night_diff=%s,
                    total_late=%s, total_undertime=%s, total_employees=%s
                WHERE work_date=%s
                """,
                (
                    updated.total_regular,
                    updated.total_overtime,
                    updated.total_night_diff,
                    updated.total_late,
                    updated.total_undertime,
                    updated.total_employees,
                    work_date,
                ),
            )

            m = breakdown.metrics
            cur.execute(
                """
                INSERT INTO employee_daily_breakdowns(
                    work_date, employee_id, display_name, regular_hours, overtime_hours,
                    late_minutes, undertime_minutes, night_diff_hours, recorded_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    display_name=VALUES(display_name),
                    regular_hours=VALUES(regular_hours), overtime_hours=VALUES(overtime_hours),
                    late_minutes=VALUES(late_minutes), undertime_minutes=VALUES(undertime_minutes),
                    night_diff_hours=VALUES(night_diff_hours), recorded_at=VALUES(recorded_at)
                """,
                (
                    work_date,
                    breakdown.employee_id,
                    breakdown.display_name,
                    m.regular_hours,
                    m.overtime_hours,
                    m.late_minutes,
                    m.undertime_minutes,
                    m.night_differential_hours,
                    breakdown.recorded_at,
                ),
            )
            return updated
