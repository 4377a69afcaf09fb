from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Payroll


class PayrollRepository(Protocol):
    def get_payroll(self, *, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def find_for_period(self, *, employee_id: int, month: int, year: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Payroll]:
        """Newest period first."""

        raise NotImplementedError

    def list_created_between(self, *, start: datetime, end: datetime) -> Sequence[Payroll]:
        """Rows with start <= created_at < end."""

        raise NotImplementedError

    def create_payroll(self, payroll: Payroll) -> Payroll:
        """Insert one row. Raises DuplicatePayrollError if the period is taken."""

        raise NotImplementedError

    def update_unless_paid(self, payroll: Payroll) -> bool:
        """Write all mutable fields unless the stored row is already Paid."""

        raise NotImplementedError

    def delete_draft(self, *, payroll_id: int) -> bool:
        raise NotImplementedError
