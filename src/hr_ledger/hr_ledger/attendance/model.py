from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance day, as needed by payroll."""

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    overtime_hours: Decimal = Decimal("0")
