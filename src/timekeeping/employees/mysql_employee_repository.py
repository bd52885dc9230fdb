from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_REGULAR_CAP_HOURS, DEFAULT_SHIFT_END, DEFAULT_SHIFT_START
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchone, normalize_mysql_time
from .model import Employee, ShiftSchedule
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, default_cap_hours: float = DEFAULT_REGULAR_CAP_HOURS):
        self._conn_factory = conn_factory
        self._default_cap_hours = float(default_cap_hours)

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, display_name, email, shift_start, shift_end, regular_cap_hours
                FROM employees
                WHERE employee_id=%s
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            cap = as_float(r.get("regular_cap_hours"))
            return Employee(
                employee_id=r["employee_id"],
                display_name=r["display_name"],
                email=r.get("email"),
                schedule=ShiftSchedule(
                    start_time=normalize_mysql_time(r.get("shift_start")) or DEFAULT_SHIFT_START,
                    end_time=normalize_mysql_time(r.get("shift_end")) or DEFAULT_SHIFT_END,
                    regular_cap_hours=cap if cap is not None else self._default_cap_hours,
                ),
            )
