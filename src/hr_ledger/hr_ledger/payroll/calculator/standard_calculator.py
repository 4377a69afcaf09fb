from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from ...common.datetime_utils import days_in_month, first_of_next_month
from ...common.money import ZERO, quantize, to_decimal
from ...core.constants import STANDARD_MONTHLY_HOURS
from ...core.enums import AllowanceType, DeductionType
from ...settings.model import PayrollPolicy
from ..model import LineItem, line_items
from .base import PayBreakdown, PayrollCalculator, ProRation


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: monthly basic, pro-rated from the joining day, plus overtime.

    net = basic + allowances + overtime - deductions (tax line included).
    """

    def prorate(self, basic_salary: Decimal, joining_date: Optional[date], *, month: int, year: int) -> ProRation:
        dim = days_in_month(year, month)
        basic = to_decimal(basic_salary)
        if joining_date is None or joining_date <= date(year, month, 1):
            return ProRation(amount=quantize(basic), days_worked=dim, days_in_month=dim, prorated=False)
        if joining_date >= first_of_next_month(year, month):
            return ProRation(amount=quantize(ZERO), days_worked=0, days_in_month=dim, prorated=True)

        days_worked = dim - joining_date.day + 1
        # Multiply before dividing so 3100 * 22 / 31 stays exact.
        amount = quantize(basic * days_worked / dim)
        return ProRation(amount=amount, days_worked=days_worked, days_in_month=dim, prorated=True)

    def overtime_amount(self, basic_salary: Decimal, overtime_hours: Decimal, multiplier: Decimal) -> Decimal:
        hours = to_decimal(overtime_hours)
        if hours <= 0:
            return ZERO
        hourly = to_decimal(basic_salary) / STANDARD_MONTHLY_HOURS
        return quantize(hours * hourly * to_decimal(multiplier))

    def tax_amount(self, taxable: Decimal, tax_rate_percent: Decimal) -> Decimal:
        return quantize(to_decimal(taxable) * to_decimal(tax_rate_percent) / 100)

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
        proration = self.prorate(basic_salary, joining_date, month=month, year=year)
        hours = quantize(to_decimal(overtime_hours))
        overtime = self.overtime_amount(basic_salary, hours, policy.overtime_multiplier)
        tax = self.tax_amount(proration.amount, policy.tax_rate_percent)

        if not allowances:
            allowances = line_items(
                [
                    (AllowanceType.HOUSING.value, ZERO, "Housing allowance"),
                    (AllowanceType.TRANSPORT.value, ZERO, "Transport allowance"),
                ]
            )

        # Any user-entered tax line is replaced by the derived one.
        others = tuple(d for d in extra_deductions if d.type != DeductionType.TAX.value)
        if not others:
            others = line_items([(DeductionType.INSURANCE.value, ZERO, "Insurance")])
        deductions = line_items([(DeductionType.TAX.value, tax, f"Income tax ({policy.tax_rate_percent}%)")]) + others

        total_allowances = sum((a.amount for a in allowances), ZERO)
        total_deductions = sum((d.amount for d in deductions), ZERO)
        net = quantize(proration.amount + total_allowances + overtime - total_deductions)

        return PayBreakdown(
            basic_salary=proration.amount,
            overtime_hours=hours,
            overtime_rate=quantize(to_decimal(policy.overtime_multiplier)),
            overtime_amount=overtime,
            allowances=tuple(allowances),
            deductions=deductions,
            tax_amount=tax,
            net_salary=net,
            proration=proration,
        )
