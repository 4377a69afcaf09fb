from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from ...settings.model import PayrollPolicy
from ..model import LineItem


@dataclass(frozen=True)
class ProRation:
    amount: Decimal
    days_worked: int
    days_in_month: int
    prorated: bool


@dataclass(frozen=True)
class PayBreakdown:
    basic_salary: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    overtime_amount: Decimal
    allowances: Tuple[LineItem, ...]
    deductions: Tuple[LineItem, ...]
    tax_amount: Decimal
    net_salary: Decimal
    proration: Optional[ProRation] = None


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def prorate(self, basic_salary: Decimal, joining_date: Optional[date], *, month: int, year: int) -> ProRation:
        raise NotImplementedError

    @abstractmethod
    def overtime_amount(self, basic_salary: Decimal, overtime_hours: Decimal, multiplier: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def tax_amount(self, taxable: Decimal, tax_rate_percent: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def breakdown(
        self,
        *,
        basic_salary: Decimal,
        joining_date: Optional[date],
        month: int,
        year: int,
        overtime_hours: Decimal,
        policy: PayrollPolicy,
        allowances: Tuple[LineItem, ...] = (),
        extra_deductions: Tuple[LineItem, ...] = (),
    ) -> PayBreakdown:
        raise NotImplementedError
