from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from .model import DailySummary, EmployeeDailyBreakdown
from .repository import SummaryRepository
from .weekly import WeeklyReportBuilder


class ReportService:
    def __init__(self, summaries: SummaryRepository, *, weekly_builder: WeeklyReportBuilder | None = None):
        self._summaries = summaries
        self._weekly = weekly_builder or WeeklyReportBuilder()

    def daily_summary_for(self, work_date: date) -> Optional[DailySummary]:
        return self._summaries.get_summary(work_date)

    def breakdown_for(self, work_date: date) -> Sequence[EmployeeDailyBreakdown]:
        rows = self._summaries.list_breakdowns(work_date)
        return sorted(rows, key=lambda r: r.display_name.lower())

    def weekly_view(self) -> list[DailySummary]:
        return self._weekly.weekly_view(self._summaries.list_summaries())
