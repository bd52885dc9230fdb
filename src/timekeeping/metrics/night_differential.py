from __future__ import annotations

from datetime import datetime, time, timedelta

from ..common.datetime_utils import round2
from ..core.constants import NIGHT_WINDOW_EVENING_START, NIGHT_WINDOW_MORNING_END


def overlap_seconds(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> float:
    return max(0.0, (min(a_end, b_end) - max(a_start, b_start)).total_seconds())


class NightDifferentialCalculator:
    """Hours of work falling in the nightly premium windows.

    Window A runs from ``evening_start`` to midnight on the punch-in date,
    window B from midnight to ``morning_end`` on the following date.
    """

    def __init__(
        self,
        *,
        evening_start: time = NIGHT_WINDOW_EVENING_START,
        morning_end: time = NIGHT_WINDOW_MORNING_END,
    ):
        self._evening_start = evening_start
        self._morning_end = morning_end

    def windows(self, time_in: datetime) -> list[tuple[datetime, datetime]]:
        midnight = datetime.combine(time_in.date() + timedelta(days=1), time.min)
        return [
            (datetime.combine(time_in.date(), self._evening_start), midnight),
            (midnight, datetime.combine(midnight.date(), self._morning_end)),
        ]

    def night_differential_hours(self, time_in: datetime, time_out: datetime) -> float:
        seconds = sum(overlap_seconds(time_in, time_out, start, end) for start, end in self.windows(time_in))
        return round2(seconds / 3600)
