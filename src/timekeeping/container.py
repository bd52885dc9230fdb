from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import PunchRecorder
from .common.datetime_utils import Clock, SystemClock
from .core.constants import DEFAULT_REGULAR_CAP_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .summaries.aggregator import DailyAggregator
from .summaries.mysql_summary_repository import MySQLSummaryRepository
from .summaries.repository import SummaryRepository
from .summaries.service import ReportService


@dataclass(frozen=True)
class Container:
    clock: Clock

    attendance_repo: AttendanceRepository
    employees_repo: EmployeeRepository
    summaries_repo: SummaryRepository

    aggregator: DailyAggregator
    punch_recorder: PunchRecorder
    report_service: ReportService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeRepository,
    summaries_repo: SummaryRepository,
    clock: Clock,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    aggregator = DailyAggregator(summaries_repo, clock=clock)
    punch_recorder = PunchRecorder(attendance_repo, employees_repo, aggregator, clock=clock)
    report_service = ReportService(summaries_repo)

    return Container(
        clock=clock,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        summaries_repo=summaries_repo,
        aggregator=aggregator,
        punch_recorder=punch_recorder,
        report_service=report_service,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    timezone: Optional[str] = None,
    regular_cap_hours: float = DEFAULT_REGULAR_CAP_HOURS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn, default_cap_hours=regular_cap_hours),
        summaries_repo=MySQLSummaryRepository(conn),
        clock=SystemClock(timezone),
        conn=conn,
    )
