from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by leave and payroll.

    Note: Plain data object (no DB access code).
    """

    employee_id: int
    full_name: str
    role: Role
    joining_date: Optional[date]
    basic_salary: Decimal
    is_active: bool = True
    email: Optional[str] = None
    department: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
