from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRangeError(ValidationError):
    """Raised when a date range is malformed or covers no business day."""


class UnknownLeaveTypeError(ValidationError):
    """Raised when a leave type is not one of the six recognized values."""


class InvalidStatusError(ValidationError):
    """Raised when a requested status is not an allowed target."""


class ConfigurationError(DomainError):
    """Raised when the organization settings record is missing or invalid."""


class InvalidStateError(DomainError):
    """Raised for an illegal status transition, edit or deletion."""


class NotFoundError(DomainError):
    """Raised when a requested record does not exist."""


class FuturePeriodError(DomainError):
    """Raised when payroll is requested for a period after the current month."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicatePayrollError(DomainError):
    """Raised by storage when a payroll already exists for (employee, month, year)."""


class InsufficientBalanceError(DomainError):
    """Raised when a leave request asks for more days than remain.

    Carries the numbers needed to render a precise message.
    """

    def __init__(self, *, leave_type: str, remaining: int, pending: int, requested: int):
        self.leave_type = leave_type
        self.remaining = remaining
        self.pending = pending
        self.requested = requested
        super().__init__(
            f"Insufficient {leave_type} leave balance. "
            f"Available: {remaining} days ({pending} pending), Requested: {requested} days"
        )
