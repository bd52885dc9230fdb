from __future__ import annotations

from typing import Iterable

from ..core.constants import WEEKLY_VIEW_DAYS
from .model import DailySummary


class WeeklyReportBuilder:
    """Most recent daily summaries, oldest first.

    Dates without a summary are simply absent; nothing is zero-filled.
    """

    def __init__(self, *, days: int = WEEKLY_VIEW_DAYS):
        self._days = int(days)

    def weekly_view(self, summaries: Iterable[DailySummary]) -> list[DailySummary]:
        latest = sorted(summaries, key=lambda s: s.work_date, reverse=True)[: self._days]
        latest.reverse()
        return latest
