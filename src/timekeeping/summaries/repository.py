from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .model import DailySummary, EmployeeDailyBreakdown

# (current summary, prior breakdown or None, new breakdown) -> new summary
ContributionFold = Callable[[DailySummary, Optional[EmployeeDailyBreakdown], EmployeeDailyBreakdown], DailySummary]


class SummaryRepository(Protocol):
    def get_summary(self, work_date: date) -> Optional[DailySummary]:
        raise NotImplementedError

    def list_summaries(self) -> Sequence[DailySummary]:
        raise NotImplementedError

    def list_breakdowns(self, work_date: date) -> Sequence[EmployeeDailyBreakdown]:
        raise NotImplementedError

    def apply_contribution(self, breakdown: EmployeeDailyBreakdown, fold: ContributionFold) -> DailySummary:
        """Atomically fold ``breakdown`` into its date's summary and store it.

        Reads the summary (an empty one when the date has none yet) and the
        prior breakdown row for the same employee, writes ``fold``'s result and
        replaces the breakdown row, all serialized per date. Nothing is written
        if any step fails.
        """

        raise NotImplementedError
