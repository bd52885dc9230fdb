from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..summaries.controller import summary_to_dict
from .model import AttendanceRecord


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "employee_id": r.employee_id,
        "date": r.work_date.isoformat(),
        "time_in": r.time_in.isoformat() if r.time_in else None,
        "time_out": r.time_out.isoformat() if r.time_out else None,
        "regular_hours": r.regular_hours,
        "overtime_hours": r.overtime_hours,
        "late_minutes": r.late_minutes,
        "undertime_minutes": r.undertime_minutes,
        "night_diff_hours": r.night_differential_hours,
    }


def _optional_datetime(payload: dict, key: str):
    value: Optional[str] = payload.get(key)
    return parse_iso_datetime(value) if value else None


def register(app: Flask, container: Container) -> None:
    recorder = container.punch_recorder

    @app.route("/api/employees/<employee_id>/time-in", methods=["POST"], endpoint="time_in")
    def time_in(employee_id: str):
        record = recorder.record_time_in(employee_id)
        return jsonify(record_to_dict(record)), 201

    @app.route("/api/employees/<employee_id>/time-out", methods=["POST"], endpoint="time_out")
    def time_out(employee_id: str):
        record = recorder.record_time_out(employee_id)
        return jsonify(record_to_dict(record))

    @app.route("/api/employees/<employee_id>/attendance", methods=["GET"], endpoint="attendance_history")
    def attendance_history(employee_id: str):
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError as exc:
            raise ValidationError("limit must be an integer") from exc
        rows = recorder.history(employee_id, limit=limit)
        return jsonify([record_to_dict(r) for r in rows])

    @app.route("/api/employees/<employee_id>/attendance/<work_date>", methods=["PUT"], endpoint="attendance_overwrite")
    def attendance_overwrite(employee_id: str, work_date: str):
        payload = request.get_json(silent=True) or {}
        record = recorder.admin_overwrite(
            employee_id,
            parse_iso_date(work_date),
            time_in=_optional_datetime(payload, "time_in"),
            time_out=_optional_datetime(payload, "time_out"),
        )
        return jsonify(record_to_dict(record))

    @app.route(
        "/api/employees/<employee_id>/attendance/<work_date>/aggregate",
        methods=["POST"],
        endpoint="attendance_aggregate",
    )
    def attendance_aggregate(employee_id: str, work_date: str):
        summary = recorder.retry_aggregation(employee_id, parse_iso_date(work_date))
        return jsonify(summary_to_dict(summary))

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_for_date")
    def attendance_for_date():
        raw = request.args.get("date")
        work_date = parse_iso_date(raw) if raw else container.clock.now().date()
        return jsonify([record_to_dict(r) for r in recorder.records_for_date(work_date)])
