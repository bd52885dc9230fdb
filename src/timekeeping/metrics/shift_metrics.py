from __future__ import annotations

from datetime import date, datetime, timedelta

from ..common.datetime_utils import hours_between, minutes_between, round2
from ..core.exceptions import InvalidInterval
from ..employees.model import ShiftSchedule
from .model import ShiftMetrics


class ShiftMetricsCalculator:
    """Derive regular/overtime/late/undertime from one punch pair.

    The schedule is anchored to the punch-in's calendar date. A schedule whose
    end is not after its start is an overnight shift and ends the next day; a
    punch-in before that end time belongs to the shift that began the evening
    before.

    Lateness is capped at the scheduled shift length: an employee who punches
    in after the scheduled end has missed the whole shift, is late by exactly
    that much and has no undertime.
    """

    def scheduled_window(self, time_in: datetime, schedule: ShiftSchedule) -> tuple[datetime, datetime]:
        work_date = time_in.date()
        start = datetime.combine(work_date, schedule.start_time)
        end = datetime.combine(work_date, schedule.end_time)
        if end <= start:
            if time_in < end:
                start -= timedelta(days=1)
            else:
                end += timedelta(days=1)
        return start, end

    def max_open_hours(self, schedule: ShiftSchedule) -> float:
        """Longest a punch-in can stay open and still be the same shift."""

        start, end = self.scheduled_window(datetime.combine(date.min, schedule.start_time), schedule)
        return hours_between(start, end) + float(schedule.regular_cap_hours)

    def metrics(self, time_in: datetime, time_out: datetime, schedule: ShiftSchedule) -> ShiftMetrics:
        if time_out < time_in:
            raise InvalidInterval(f"time out {time_out.isoformat()} is before time in {time_in.isoformat()}")

        scheduled_start, scheduled_end = self.scheduled_window(time_in, schedule)
        shift_minutes = minutes_between(scheduled_start, scheduled_end)

        late = min(max(0.0, minutes_between(scheduled_start, time_in)), shift_minutes)
        total = hours_between(time_in, time_out)
        cap = float(schedule.regular_cap_hours)
        regular = min(total, cap)
        overtime = max(0.0, total - cap)
        undertime = minutes_between(time_out, scheduled_end) if time_out < scheduled_end else 0.0

        return ShiftMetrics(
            total_hours=round2(total),
            regular_hours=round2(regular),
            overtime_hours=round2(overtime),
            late_minutes=round2(late),
            undertime_minutes=round2(undertime),
        )
