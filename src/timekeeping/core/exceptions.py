from __future__ import annotations

from datetime import date


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or missing."""


class InvalidInterval(DomainError):
    """Raised when a punch-out does not come after its punch-in."""


class StateConflictError(DomainError):
    """Raised when a punch conflicts with the current state of the record."""


class AlreadyPunchedIn(StateConflictError):
    pass


class AlreadyPunchedOut(StateConflictError):
    pass


class NotPunchedIn(StateConflictError):
    pass


class StorageError(Exception):
    """Raised when the backing store fails."""


class AggregationPendingError(StorageError):
    """The punch-out was persisted but the daily summary update failed.

    Retry with ``PunchRecorder.retry_aggregation(employee_id, work_date)``.
    """

    def __init__(self, message: str, *, employee_id: str, work_date: date):
        super().__init__(message)
        self.employee_id = employee_id
        self.work_date = work_date
