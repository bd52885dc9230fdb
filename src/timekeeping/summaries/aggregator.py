from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from ..common.datetime_utils import Clock, SystemClock, round2
from ..metrics.model import DailyMetrics
from .model import DailySummary, EmployeeDailyBreakdown
from .repository import SummaryRepository

logger = logging.getLogger(__name__)


def _shift_totals(summary: DailySummary, metrics: DailyMetrics, sign: int) -> DailySummary:
    return replace(
        summary,
        total_regular=round2(summary.total_regular + sign * metrics.regular_hours),
        total_overtime=round2(summary.total_overtime + sign * metrics.overtime_hours),
        total_night_diff=round2(summary.total_night_diff + sign * metrics.night_differential_hours),
        total_late=round2(summary.total_late + sign * metrics.late_minutes),
        total_undertime=round2(summary.total_undertime + sign * metrics.undertime_minutes),
    )


def fold_contribution(
    summary: DailySummary,
    prior: Optional[EmployeeDailyBreakdown],
    current: EmployeeDailyBreakdown,
) -> DailySummary:
    """Return ``summary`` with ``current`` counted once for its employee.

    A first contribution adds the metrics and one employee. A correction
    takes the prior contribution back out before adding the new one, so
    replaying the same contribution leaves the totals unchanged.
    """

    if prior is None:
        summary = _shift_totals(summary, current.metrics, +1)
        return replace(summary, total_employees=summary.total_employees + 1)

    if prior.metrics == current.metrics:
        return summary
    return _shift_totals(_shift_totals(summary, prior.metrics, -1), current.metrics, +1)


class DailyAggregator:
    def __init__(self, summaries: SummaryRepository, *, clock: Clock | None = None):
        self._summaries = summaries
        self._clock = clock or SystemClock()

    def apply(self, work_date: date, employee_id: str, metrics: DailyMetrics, display_name: str) -> DailySummary:
        breakdown = EmployeeDailyBreakdown(
            work_date=work_date,
            employee_id=employee_id,
            display_name=display_name,
            metrics=metrics,
            recorded_at=self._clock.now(),
        )
        summary = self._summaries.apply_contribution(breakdown, fold_contribution)
        logger.info(
            "daily summary %s updated by %s: employees=%d regular=%.2f",
            work_date.isoformat(),
            employee_id,
            summary.total_employees,
            summary.total_regular,
        )
        return summary
