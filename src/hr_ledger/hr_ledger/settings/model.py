from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.constants import (
    DEFAULT_ANNUAL_QUOTA,
    DEFAULT_CARRY_FORWARD_LIMIT,
    DEFAULT_MATERNITY_QUOTA,
    DEFAULT_PATERNITY_QUOTA,
    DEFAULT_PERSONAL_QUOTA,
    DEFAULT_SICK_QUOTA,
    DEFAULT_UNPAID_QUOTA,
)
from ..core.enums import LeaveType, PayrollCycle


@dataclass(frozen=True)
class LeaveQuotas:
    """Annual day pool per leave type."""

    annual: int = DEFAULT_ANNUAL_QUOTA
    sick: int = DEFAULT_SICK_QUOTA
    personal: int = DEFAULT_PERSONAL_QUOTA
    maternity: int = DEFAULT_MATERNITY_QUOTA
    paternity: int = DEFAULT_PATERNITY_QUOTA
    unpaid: int = DEFAULT_UNPAID_QUOTA

    def for_type(self, leave_type: LeaveType) -> int:
        return int(getattr(self, leave_type.name.lower()))


@dataclass(frozen=True)
class PayrollPolicy:
    tax_rate_percent: Decimal = Decimal("0")
    overtime_multiplier: Decimal = Decimal("1.5")
    pay_day: int = 1
    cycle: PayrollCycle = PayrollCycle.MONTHLY


@dataclass(frozen=True)
class Settings:
    """Organization-wide policy. Exactly one record exists system-wide."""

    quotas: LeaveQuotas = field(default_factory=LeaveQuotas)
    carry_forward_limit: int = DEFAULT_CARRY_FORWARD_LIMIT
    payroll: PayrollPolicy = field(default_factory=PayrollPolicy)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "leaveSettings": {
                "annualLeaveQuota": self.quotas.annual,
                "sickLeaveQuota": self.quotas.sick,
                "personalLeaveQuota": self.quotas.personal,
                "maternityLeaveQuota": self.quotas.maternity,
                "paternityLeaveQuota": self.quotas.paternity,
                "unpaidLeaveQuota": self.quotas.unpaid,
                "carryForwardLimit": self.carry_forward_limit,
            },
            "payrollSettings": {
                "taxRate": str(self.payroll.tax_rate_percent),
                "overtimeRate": str(self.payroll.overtime_multiplier),
                "payDay": self.payroll.pay_day,
                "payrollCycle": self.payroll.cycle.value,
            },
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
