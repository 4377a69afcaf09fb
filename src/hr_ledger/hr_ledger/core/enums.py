from __future__ import annotations

from enum import Enum

from .exceptions import UnknownLeaveTypeError


class Role(str, Enum):
    """User role used for authorization and payroll eligibility."""

    ADMIN = "admin"
    EMPLOYEE = "employee"
    TEAM_LEAD = "team_lead"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LATE = "late"


class LeaveType(str, Enum):
    """The six leave types an employee can request."""

    ANNUAL = "Annual"
    SICK = "Sick"
    PERSONAL = "Personal"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    UNPAID = "Unpaid"

    @classmethod
    def parse(cls, value) -> "LeaveType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise UnknownLeaveTypeError(f"Unknown leave type: {value!r}")


class LeaveStatus(str, Enum):
    """Approval workflow of a leave request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PayrollStatus(str, Enum):
    DRAFT = "Draft"
    PROCESSED = "Processed"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"


class PayrollCycle(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class AllowanceType(str, Enum):
    HOUSING = "housing"
    TRANSPORT = "transport"
    MEAL = "meal"
    OTHER = "other"


class DeductionType(str, Enum):
    TAX = "tax"
    INSURANCE = "insurance"
    OTHER = "other"
