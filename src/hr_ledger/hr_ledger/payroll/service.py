from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ..common.datetime_utils import first_of_next_month
from ..common.money import ZERO, to_money
from ..common.validators import require_month, require_year
from ..core.enums import PayrollStatus
from ..core.exceptions import DuplicatePayrollError, InvalidStateError, NotFoundError
from ..employees.repository import EmployeeRepository
from ..settings.service import SettingsProvider
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import LineItem, Payroll, PayrollPatch, PayrollUpdateResult
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

PAID_MESSAGE = "Payroll has already been paid and can no longer be modified"


class PayrollService:
    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        settings: SettingsProvider,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._settings = settings
        self._calculator = calculator or StandardPayrollCalculator()

    def create_payroll(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        basic_salary: Optional[Decimal] = None,
        overtime_hours: Decimal = ZERO,
        allowances: Tuple[LineItem, ...] = (),
        deductions: Tuple[LineItem, ...] = (),
        remarks: Optional[str] = None,
    ) -> Payroll:
        """Create one Draft payroll by hand.

        Without an explicit basic salary the employee's salary is used and
        pro-rated from the joining date. The tax line is always derived.
        """

        month = require_month(month)
        year = require_year(year)
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        settings = self._settings.require()
        if self._payrolls.find_for_period(employee_id=employee.employee_id, month=month, year=year):
            raise InvalidStateError("Payroll already exists for this month")

        explicit = basic_salary is not None
        if not explicit and employee.joining_date and employee.joining_date >= first_of_next_month(year, month):
            raise InvalidStateError(f"Employee joined on {employee.joining_date.isoformat()}, after this period")

        pay = self._calculator.breakdown(
            basic_salary=to_money(basic_salary, "basicSalary") if explicit else employee.basic_salary,
            joining_date=None if explicit else employee.joining_date,
            month=month,
            year=year,
            overtime_hours=overtime_hours,
            policy=settings.payroll,
            allowances=tuple(allowances),
            extra_deductions=tuple(deductions),
        )

        draft = Payroll(
            employee_id=employee.employee_id,
            month=month,
            year=year,
            basic_salary=pay.basic_salary,
            overtime_hours=pay.overtime_hours,
            overtime_rate=pay.overtime_rate,
            overtime_amount=pay.overtime_amount,
            allowances=pay.allowances,
            deductions=pay.deductions,
            tax_amount=pay.tax_amount,
            net_salary=pay.net_salary,
            status=PayrollStatus.DRAFT,
            remarks=remarks,
        )
        try:
            created = self._payrolls.create_payroll(draft)
        except DuplicatePayrollError:
            raise InvalidStateError("Payroll already exists for this month")

        logger.info("Manual payroll %s created for employee %s (%s/%s)", created.payroll_id, employee_id, month, year)
        return created

    def update_payroll(self, payroll_id: int, patch: PayrollPatch) -> PayrollUpdateResult:
        current = self.get_payroll(payroll_id)
        if current.is_paid:
            return PayrollUpdateResult(payroll=current, updated=False, message=PAID_MESSAGE)

        changed = patch.apply(current)
        if changed == current:
            return PayrollUpdateResult(payroll=current, updated=False)

        if not self._payrolls.update_unless_paid(changed):
            # Paid between our read and the write.
            return PayrollUpdateResult(payroll=self.get_payroll(payroll_id), updated=False, message=PAID_MESSAGE)

        logger.info("Payroll %s updated (status %s)", current.payroll_id, changed.status.value)
        return PayrollUpdateResult(payroll=self.get_payroll(payroll_id), updated=True)

    def delete_payroll(self, payroll_id: int) -> None:
        current = self.get_payroll(payroll_id)
        if current.status != PayrollStatus.DRAFT:
            raise InvalidStateError("Only draft payrolls can be deleted")
        if not self._payrolls.delete_draft(payroll_id=current.payroll_id):
            raise InvalidStateError("Only draft payrolls can be deleted")
        logger.info("Payroll %s deleted", current.payroll_id)

    def get_payroll(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_payroll(payroll_id=int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        return self._payrolls.list_payrolls(
            month=require_month(month) if month is not None else None,
            year=require_year(year) if year is not None else None,
            employee_id=employee_id,
        )
