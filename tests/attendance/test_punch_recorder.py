from __future__ import annotations

from datetime import date, datetime

import pytest

from timekeeping.core.exceptions import (
    AggregationPendingError,
    AlreadyPunchedIn,
    AlreadyPunchedOut,
    InvalidInterval,
    NotPunchedIn,
    StorageError,
    ValidationError,
)

DAY = date(2024, 1, 10)


def test_time_in_creates_record(recorder, attendance_repo):
    record = recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 8, 45))

    assert record.time_in == datetime(2024, 1, 10, 8, 45)
    stored = attendance_repo.get_for_employee_and_date("emp-a", DAY)
    assert stored.time_in == datetime(2024, 1, 10, 8, 45)
    assert stored.time_out is None
    assert stored.regular_hours is None


def test_time_in_uses_injected_clock(recorder, attendance_repo, clock):
    recorder.record_time_in("emp-a")

    assert attendance_repo.get_for_employee_and_date("emp-a", clock.now().date()).time_in == clock.now()


def test_second_time_in_is_rejected_and_changes_nothing(recorder, attendance_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 8, 45))
    writes_before = list(attendance_repo.writes)

    with pytest.raises(AlreadyPunchedIn):
        recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 8, 50))

    assert attendance_repo.writes == writes_before
    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).time_in == datetime(2024, 1, 10, 8, 45)


def test_time_out_without_time_in_writes_nothing(recorder, attendance_repo, summaries_repo):
    with pytest.raises(NotPunchedIn):
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 18, 0))

    assert attendance_repo.writes == []
    assert summaries_repo.list_summaries() == []


def test_time_out_derives_metrics_and_updates_summary(recorder, attendance_repo, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 8, 45))
    record = recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 19, 30))

    assert record.regular_hours == 9.0
    assert record.overtime_hours == 1.75
    assert record.late_minutes == 0.0
    assert record.undertime_minutes == 0.0
    assert record.night_differential_hours == 0.0
    assert attendance_repo.get_for_employee_and_date("emp-a", DAY) == record

    summary = summaries_repo.get_summary(DAY)
    assert summary.total_regular == 9.0
    assert summary.total_overtime == 1.75
    assert summary.total_employees == 1
    assert summaries_repo.get_breakdown(DAY, "emp-a").display_name == "Alice"


def test_second_time_out_is_rejected(recorder, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))
    recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 18, 0))

    with pytest.raises(AlreadyPunchedOut):
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 18, 5))

    assert summaries_repo.get_summary(DAY).total_employees == 1


def test_time_out_not_after_time_in_is_rejected(recorder, attendance_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))

    with pytest.raises(InvalidInterval):
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 9, 0))

    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).time_out is None


def test_overnight_shift_closes_previous_days_record(recorder, summaries_repo):
    recorder.record_time_in("emp-n", now=datetime(2024, 1, 10, 21, 0))
    record = recorder.record_time_out("emp-n", now=datetime(2024, 1, 11, 2, 30))

    assert record.work_date == DAY
    assert record.night_differential_hours == 4.5
    assert summaries_repo.get_summary(DAY).total_night_diff == 4.5
    assert summaries_repo.get_summary(date(2024, 1, 11)) is None


def test_unknown_or_blank_employee_is_a_validation_error(recorder):
    with pytest.raises(ValidationError):
        recorder.record_time_in("emp-zzz", now=datetime(2024, 1, 10, 9, 0))
    with pytest.raises(ValidationError):
        recorder.record_time_in("   ", now=datetime(2024, 1, 10, 9, 0))


def test_record_write_failure_skips_aggregation(recorder, attendance_repo, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))
    attendance_repo.fail_next_write = True

    with pytest.raises(StorageError) as exc_info:
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 18, 0))

    assert not isinstance(exc_info.value, AggregationPendingError)
    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).time_out is None
    assert summaries_repo.get_summary(DAY) is None


def test_aggregation_failure_is_pending_and_retriable(recorder, attendance_repo, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))
    summaries_repo.fail_next_apply = True

    with pytest.raises(AggregationPendingError) as exc_info:
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 18, 0))

    assert exc_info.value.employee_id == "emp-a"
    assert exc_info.value.work_date == DAY
    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).time_out == datetime(2024, 1, 10, 18, 0)
    assert summaries_repo.get_summary(DAY) is None

    summary = recorder.retry_aggregation("emp-a", DAY)
    assert summary.total_employees == 1
    assert summary.total_regular == 9.0

    # Retrying again must not count the employee twice.
    summary = recorder.retry_aggregation("emp-a", DAY)
    assert summary.total_employees == 1
    assert summary.total_regular == 9.0


def test_retry_aggregation_requires_finished_record(recorder):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))

    with pytest.raises(NotPunchedIn):
        recorder.retry_aggregation("emp-a", DAY)


def test_admin_overwrite_replaces_contribution(recorder, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 8, 45))
    recorder.record_time_out("emp-a", now=datetime(2024, 1, 10, 19, 30))
    recorder.record_time_in("emp-b", now=datetime(2024, 1, 10, 9, 0))
    recorder.record_time_out("emp-b", now=datetime(2024, 1, 10, 17, 0))

    summary = summaries_repo.get_summary(DAY)
    assert summary.total_regular == 17.0
    assert summary.total_undertime == 60.0

    record = recorder.admin_overwrite(
        "emp-a",
        DAY,
        time_in=datetime(2024, 1, 10, 9, 30),
        time_out=datetime(2024, 1, 10, 18, 0),
    )

    assert record.regular_hours == 8.5
    assert record.late_minutes == 30.0
    summary = summaries_repo.get_summary(DAY)
    assert summary.total_regular == 16.5
    assert summary.total_overtime == 0.0
    assert summary.total_late == 30.0
    assert summary.total_undertime == 60.0
    assert summary.total_employees == 2


def test_admin_overwrite_validates_input(recorder):
    with pytest.raises(ValidationError):
        recorder.admin_overwrite("emp-a", DAY, time_in=datetime(2024, 1, 10, 9, 0), time_out=None)
    with pytest.raises(InvalidInterval):
        recorder.admin_overwrite(
            "emp-a",
            DAY,
            time_in=datetime(2024, 1, 10, 18, 0),
            time_out=datetime(2024, 1, 10, 9, 0),
        )


def test_history_is_most_recent_first(recorder):
    for day in (8, 9, 10):
        recorder.record_time_in("emp-a", now=datetime(2024, 1, day, 9, 0))
        recorder.record_time_out("emp-a", now=datetime(2024, 1, day, 18, 0))

    history = recorder.history("emp-a", limit=2)

    assert [r.work_date for r in history] == [date(2024, 1, 10), date(2024, 1, 9)]


def test_records_for_date_lists_every_employee(recorder):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))
    recorder.record_time_in("emp-b", now=datetime(2024, 1, 10, 9, 5))

    rows = recorder.records_for_date(DAY)

    assert [r.employee_id for r in rows] == ["emp-a", "emp-b"]


def test_forgotten_punch_out_is_not_closed_a_day_later(recorder, attendance_repo, summaries_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))

    with pytest.raises(NotPunchedIn):
        recorder.record_time_out("emp-a", now=datetime(2024, 1, 11, 17, 0))

    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).is_open
    assert summaries_repo.get_summary(DAY) is None


def test_forgotten_punch_out_does_not_block_next_morning(recorder, attendance_repo):
    recorder.record_time_in("emp-a", now=datetime(2024, 1, 10, 9, 0))

    record = recorder.record_time_in("emp-a", now=datetime(2024, 1, 11, 8, 45))

    assert record.work_date == date(2024, 1, 11)
    assert attendance_repo.get_for_employee_and_date("emp-a", DAY).is_open


def test_time_in_during_open_overnight_shift_is_rejected(recorder, attendance_repo):
    recorder.record_time_in("emp-n", now=datetime(2024, 1, 10, 22, 0))

    with pytest.raises(AlreadyPunchedIn):
        recorder.record_time_in("emp-n", now=datetime(2024, 1, 11, 1, 0))

    assert attendance_repo.get_for_employee_and_date("emp-n", date(2024, 1, 11)) is None
