from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional

from ..core.enums import LeaveStatus, LeaveType
from ..settings.model import LeaveQuotas


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    duration: int
    reason: str
    status: LeaveStatus
    created_at: Optional[datetime] = None
    action_by: Optional[int] = None
    action_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "employeeId": self.employee_id,
            "leaveType": self.leave_type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "duration": self.duration,
            "reason": self.reason,
            "status": self.status.value,
            "actionBy": self.action_by,
            "actionAt": self.action_at.isoformat() if self.action_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class LeaveBalance:
    """Per-employee, per-year day pools. Used/remaining are never stored here."""

    employee_id: int
    year: int
    annual_leave_balance: int
    sick_leave_balance: int
    carry_forward: int = 0
    balance_id: Optional[int] = None


class QuotaSource(str, Enum):
    BALANCE_ROW = "balance_row"
    SETTINGS = "settings"


@dataclass(frozen=True)
class QuotaRule:
    """Where the total for a leave type comes from."""

    source: QuotaSource
    balance_field: Optional[str] = None
    adds_carry_forward: bool = False

    def total(self, leave_type: LeaveType, balance: LeaveBalance, quotas: LeaveQuotas) -> int:
        if self.source == QuotaSource.BALANCE_ROW:
            total = int(getattr(balance, self.balance_field))
            if self.adds_carry_forward:
                total += int(balance.carry_forward)
            return total
        return quotas.for_type(leave_type)


# Annual and sick pools are frozen on the balance row when it is created;
# the other four follow the live settings.
QUOTA_RULES: Dict[LeaveType, QuotaRule] = {
    LeaveType.ANNUAL: QuotaRule(QuotaSource.BALANCE_ROW, "annual_leave_balance", adds_carry_forward=True),
    LeaveType.SICK: QuotaRule(QuotaSource.BALANCE_ROW, "sick_leave_balance"),
    LeaveType.PERSONAL: QuotaRule(QuotaSource.SETTINGS),
    LeaveType.MATERNITY: QuotaRule(QuotaSource.SETTINGS),
    LeaveType.PATERNITY: QuotaRule(QuotaSource.SETTINGS),
    LeaveType.UNPAID: QuotaRule(QuotaSource.SETTINGS),
}


@dataclass(frozen=True)
class TypeBalance:
    leave_type: LeaveType
    total: int
    used: int
    pending: int

    @property
    def remaining(self) -> int:
        # Not clamped: a negative value exposes data changed outside the normal flow.
        return self.total - self.used - self.pending

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "used": self.used,
            "pending": self.pending,
            "remaining": self.remaining,
        }


@dataclass(frozen=True)
class BalanceSnapshot:
    employee_id: int
    year: int
    carry_forward: int
    balances: Dict[LeaveType, TypeBalance]

    def __getitem__(self, leave_type: LeaveType) -> TypeBalance:
        return self.balances[leave_type]

    def to_dict(self) -> dict:
        out: dict = {"employeeId": self.employee_id, "year": self.year}
        for leave_type in LeaveType:
            out[f"{leave_type.value.lower()}Leave"] = self.balances[leave_type].to_dict()
        out["carryForward"] = self.carry_forward
        return out
