from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from .model import DailySummary, EmployeeDailyBreakdown


def summary_to_dict(s: DailySummary) -> dict:
    return {
        "date": s.work_date.isoformat(),
        "total_regular": s.total_regular,
        "total_overtime": s.total_overtime,
        "total_night_diff": s.total_night_diff,
        "total_late": s.total_late,
        "total_undertime": s.total_undertime,
        "total_employees": s.total_employees,
    }


def breakdown_to_dict(b: EmployeeDailyBreakdown) -> dict:
    m = b.metrics
    return {
        "employee_id": b.employee_id,
        "name": b.display_name,
        "regular_hours": m.regular_hours,
        "overtime_hours": m.overtime_hours,
        "night_diff_hours": m.night_differential_hours,
        "late_minutes": m.late_minutes,
        "undertime_minutes": m.undertime_minutes,
        "recorded_at": b.recorded_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/summaries/weekly", methods=["GET"], endpoint="weekly_summary")
    def weekly_summary():
        return jsonify([summary_to_dict(s) for s in reports.weekly_view()])

    @app.route("/api/summaries/<work_date>", methods=["GET"], endpoint="daily_summary")
    def daily_summary(work_date: str):
        summary = reports.daily_summary_for(parse_iso_date(work_date))
        if summary is None:
            return jsonify({"error": "NotFound", "message": f"No summary for {work_date}"}), 404
        return jsonify(summary_to_dict(summary))

    @app.route("/api/summaries/<work_date>/breakdown", methods=["GET"], endpoint="daily_breakdown")
    def daily_breakdown(work_date: str):
        rows = reports.breakdown_for(parse_iso_date(work_date))
        return jsonify([breakdown_to_dict(b) for b in rows])
