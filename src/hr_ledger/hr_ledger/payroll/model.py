from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from ..common.datetime_utils import parse_optional_date
from ..common.money import ZERO, to_money
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class LineItem:
    """One allowance or deduction entry."""

    type: str
    amount: Decimal
    description: str = ""

    def to_dict(self) -> dict:
        return {"type": self.type, "amount": str(self.amount), "description": self.description}

    @classmethod
    def from_mapping(cls, data: Mapping) -> "LineItem":
        kind = str(data.get("type") or "").strip()
        if not kind:
            raise ValidationError("Line item type is required")
        return cls(
            type=kind,
            amount=to_money(data.get("amount"), f"{kind} amount"),
            description=str(data.get("description") or ""),
        )


def line_items(entries: Iterable[Tuple[str, object, str]]) -> Tuple[LineItem, ...]:
    """Build line items from (type, amount, description), dropping zero amounts."""

    items = []
    for kind, amount, description in entries:
        money = to_money(amount, f"{kind} amount")
        if money == ZERO:
            continue
        items.append(LineItem(type=str(kind), amount=money, description=description))
    return tuple(items)


def parse_line_items(value) -> Tuple[LineItem, ...]:
    """Accept either a list of {type, amount, description} or a {type: amount} mapping."""

    if value is None:
        return ()
    if isinstance(value, Mapping):
        return line_items((kind, amount, "") for kind, amount in value.items())
    if isinstance(value, (list, tuple)):
        parsed = [item if isinstance(item, LineItem) else LineItem.from_mapping(item) for item in value]
        return tuple(item for item in parsed if item.amount != ZERO)
    raise ValidationError("Line items must be a list or an object")


def _sum(items: Iterable[LineItem]) -> Decimal:
    return sum((i.amount for i in items), ZERO)


@dataclass(frozen=True)
class Payroll:
    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    net_salary: Decimal
    overtime_hours: Decimal = ZERO
    overtime_rate: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    allowances: Tuple[LineItem, ...] = ()
    deductions: Tuple[LineItem, ...] = ()
    tax_amount: Decimal = ZERO
    status: PayrollStatus = PayrollStatus.DRAFT
    payment_date: Optional[date] = None
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    remarks: Optional[str] = None
    payroll_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.status == PayrollStatus.PAID

    @property
    def total_allowances(self) -> Decimal:
        return _sum(self.allowances)

    @property
    def total_deductions(self) -> Decimal:
        return _sum(self.deductions)

    def to_dict(self) -> dict:
        return {
            "id": self.payroll_id,
            "employeeId": self.employee_id,
            "month": self.month,
            "year": self.year,
            "basicSalary": str(self.basic_salary),
            "overtimeHours": str(self.overtime_hours),
            "overtimeRate": str(self.overtime_rate),
            "overtimeAmount": str(self.overtime_amount),
            "allowances": [i.to_dict() for i in self.allowances],
            "deductions": [i.to_dict() for i in self.deductions],
            "taxAmount": str(self.tax_amount),
            "netSalary": str(self.net_salary),
            "status": self.status.value,
            "paymentDate": self.payment_date.isoformat() if self.payment_date else None,
            "paymentMethod": self.payment_method.value,
            "remarks": self.remarks,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class PayrollPatch:
    """Partial update. A field left as None is not touched."""

    status: Optional[PayrollStatus] = None
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    remarks: Optional[str] = None
    basic_salary: Optional[Decimal] = None
    allowances: Optional[Tuple[LineItem, ...]] = None
    deductions: Optional[Tuple[LineItem, ...]] = None
    net_salary: Optional[Decimal] = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> "PayrollPatch":
        status = None
        if data.get("status") is not None:
            try:
                status = PayrollStatus(data["status"])
            except ValueError:
                raise ValidationError(f"Invalid payroll status: {data['status']!r}")

        method = None
        if data.get("paymentMethod") is not None:
            try:
                method = PaymentMethod(data["paymentMethod"])
            except ValueError:
                raise ValidationError(f"Invalid payment method: {data['paymentMethod']!r}")

        try:
            payment_date = parse_optional_date(data.get("paymentDate"))
        except ValueError:
            raise ValidationError("paymentDate must be YYYY-MM-DD")

        return cls(
            status=status,
            payment_date=payment_date,
            payment_method=method,
            remarks=data.get("remarks"),
            basic_salary=to_money(data["basicSalary"], "basicSalary") if "basicSalary" in data else None,
            allowances=parse_line_items(data["allowances"]) if "allowances" in data else None,
            deductions=parse_line_items(data["deductions"]) if "deductions" in data else None,
            net_salary=to_money(data["netSalary"], "netSalary") if "netSalary" in data else None,
        )

    def apply(self, payroll: Payroll) -> Payroll:
        changes: dict = {}
        for name in ("status", "remarks", "basic_salary", "allowances", "deductions", "net_salary"):
            value = getattr(self, name)
            if value is not None:
                changes[name] = value

        # Payment details only travel with the transition to Paid.
        if changes.get("status") == PayrollStatus.PAID:
            if self.payment_date is not None:
                changes["payment_date"] = self.payment_date
            if self.payment_method is not None:
                changes["payment_method"] = self.payment_method

        if not changes:
            return payroll
        return replace(payroll, **changes)


@dataclass(frozen=True)
class PayrollUpdateResult:
    payroll: Payroll
    updated: bool
    message: Optional[str] = None

    def to_dict(self) -> dict:
        out = self.payroll.to_dict()
        if self.message:
            out["message"] = self.message
        return out


class GenerationOutcome(str, Enum):
    CREATED = "created"
    NOTHING_NEW = "nothing_new"
    NO_ELIGIBLE_EMPLOYEES = "no_eligible_employees"


@dataclass(frozen=True)
class SkippedEmployee:
    employee_id: int
    reason: str

    def to_dict(self) -> dict:
        return {"employeeId": self.employee_id, "reason": self.reason}


@dataclass(frozen=True)
class GenerationResult:
    month: int
    year: int
    outcome: GenerationOutcome
    message: str
    created: List[Payroll] = field(default_factory=list)
    skipped: List[SkippedEmployee] = field(default_factory=list)
    failed: List[SkippedEmployee] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "outcome": self.outcome.value,
            "message": self.message,
            "created": [p.to_dict() for p in self.created],
            "skipped": [s.to_dict() for s in self.skipped],
            "failed": [f.to_dict() for f in self.failed],
        }


@dataclass(frozen=True)
class MonthlyTotal:
    month: int
    year: int
    total_payout: Decimal
    count: int
    avg_salary: Decimal

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "totalPayout": str(self.total_payout),
            "count": self.count,
            "avgSalary": str(self.avg_salary),
        }


@dataclass(frozen=True)
class CompanyTotals:
    total_payroll: Decimal
    total_deductions: Decimal
    employee_count: int

    def to_dict(self) -> dict:
        return {
            "totalPayroll": str(self.total_payroll),
            "totalDeductions": str(self.total_deductions),
            "employeeCount": self.employee_count,
        }


@dataclass(frozen=True)
class EmployeeHistory:
    employee_id: int
    payrolls: List[Payroll]
    total_net: Decimal

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "payrolls": [p.to_dict() for p in self.payrolls],
            "totalNet": str(self.total_net),
        }
