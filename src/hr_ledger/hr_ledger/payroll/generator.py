from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import first_of_next_month, month_bounds, now_local
from ..common.money import ZERO, to_decimal
from ..common.validators import require_month, require_year
from ..core.constants import DEFAULT_PAYROLL_WORKERS
from ..core.enums import AttendanceStatus, PayrollStatus
from ..core.exceptions import DuplicatePayrollError, FuturePeriodError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..settings.model import Settings
from ..settings.service import SettingsProvider
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import GenerationOutcome, GenerationResult, Payroll, SkippedEmployee
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

SKIP_ALREADY_EXISTS = "already exists"
SKIP_JOINED_AFTER_PERIOD = "joined after period"
SKIP_NO_BASIC_SALARY = "no basic salary"
SKIP_NO_JOINING_DATE = "no joining date"


def overtime_by_employee(rows: Sequence[AttendanceRecord]) -> Dict[int, Decimal]:
    """Sum overtime hours of Present days per employee."""

    totals: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    for row in rows:
        if row.status == AttendanceStatus.PRESENT:
            totals[row.employee_id] += to_decimal(row.overtime_hours)
    return totals


class PayrollGenerator:
    """Builds the Draft payroll of every eligible employee for one month.

    Each employee is handled independently and written with a single insert;
    the (employee, month, year) unique key turns a concurrent duplicate into a skip.
    """

    def __init__(
        self,
        *,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        settings: SettingsProvider,
        calculator: Optional[PayrollCalculator] = None,
        max_workers: int = DEFAULT_PAYROLL_WORKERS,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._attendance = attendance
        self._settings = settings
        self._calculator = calculator or StandardPayrollCalculator()
        self._max_workers = max(1, int(max_workers))

    def generate_for_period(self, *, month: int, year: int, now: Optional[datetime] = None) -> GenerationResult:
        month = require_month(month)
        year = require_year(year)
        now = now or now_local()
        if (year, month) > (now.year, now.month):
            raise FuturePeriodError(f"Cannot generate payroll for a future period ({month}/{year})")

        settings = self._settings.require()

        candidates = [e for e in self._employees.list_employees(active_only=True) if not e.is_admin]
        if not any(e.joining_date is not None for e in candidates):
            logger.info("Payroll %s/%s: no eligible employees", month, year)
            return GenerationResult(
                month=month,
                year=year,
                outcome=GenerationOutcome.NO_ELIGIBLE_EMPLOYEES,
                message="No eligible employees found for payroll generation",
            )

        start, end = month_bounds(year, month)
        overtime = overtime_by_employee(self._attendance.find_attendance(start_date=start, end_date=end))

        def _run(employee: Employee) -> Tuple[str, object]:
            try:
                return self._generate_one(
                    employee,
                    month=month,
                    year=year,
                    settings=settings,
                    overtime_hours=overtime.get(employee.employee_id, ZERO),
                )
            except Exception as e:
                logger.exception("Payroll %s/%s failed for employee %s", month, year, employee.employee_id)
                return "failed", SkippedEmployee(employee.employee_id, str(e))

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="payroll") as pool:
            outcomes = list(pool.map(_run, candidates))

        created: List[Payroll] = []
        skipped: List[SkippedEmployee] = []
        failed: List[SkippedEmployee] = []
        for kind, value in outcomes:
            if kind == "created":
                created.append(value)
            elif kind == "skipped":
                skipped.append(value)
            else:
                failed.append(value)

        if created:
            outcome = GenerationOutcome.CREATED
            message = f"Generated {len(created)} payrolls for {month}/{year}"
        else:
            outcome = GenerationOutcome.NOTHING_NEW
            message = f"No new payrolls generated for {month}/{year}"
        if skipped:
            message += f", {len(skipped)} skipped"
        if failed:
            message += f", {len(failed)} failed"

        logger.info("Payroll %s/%s: %s", month, year, message)
        return GenerationResult(
            month=month,
            year=year,
            outcome=outcome,
            message=message,
            created=created,
            skipped=skipped,
            failed=failed,
        )

    def _generate_one(
        self,
        employee: Employee,
        *,
        month: int,
        year: int,
        settings: Settings,
        overtime_hours: Decimal,
    ) -> Tuple[str, object]:
        def _skip(reason: str):
            logger.info("Payroll %s/%s: skip employee %s (%s)", month, year, employee.employee_id, reason)
            return "skipped", SkippedEmployee(employee.employee_id, reason)

        if employee.joining_date is None:
            return _skip(SKIP_NO_JOINING_DATE)
        if self._payrolls.find_for_period(employee_id=employee.employee_id, month=month, year=year):
            return _skip(SKIP_ALREADY_EXISTS)
        if employee.joining_date >= first_of_next_month(year, month):
            return _skip(SKIP_JOINED_AFTER_PERIOD)
        if to_decimal(employee.basic_salary) <= 0:
            return _skip(SKIP_NO_BASIC_SALARY)

        pay = self._calculator.breakdown(
            basic_salary=employee.basic_salary,
            joining_date=employee.joining_date,
            month=month,
            year=year,
            overtime_hours=overtime_hours,
            policy=settings.payroll,
        )

        remarks = None
        if pay.proration is not None and pay.proration.prorated:
            remarks = (
                f"Pro-rated salary: joined on {employee.joining_date.isoformat()}, "
                f"{pay.proration.days_worked} of {pay.proration.days_in_month} days"
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
            return "created", self._payrolls.create_payroll(draft)
        except DuplicatePayrollError:
            # Lost the race against a concurrent run for the same period.
            return _skip(SKIP_ALREADY_EXISTS)
