from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveBalance, LeaveRequest


class LeaveRepository(Protocol):
    # Balances
    def get_balance(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create_balance_if_absent(
        self,
        *,
        employee_id: int,
        year: int,
        annual_leave_balance: int,
        sick_leave_balance: int,
        carry_forward: int = 0,
    ) -> Tuple[LeaveBalance, bool]:
        """Insert unless (employee, year) exists. Returns (row, created)."""

        raise NotImplementedError

    def list_balances(self, *, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    # Requests
    def create_leave(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        duration: int,
        reason: str,
    ) -> LeaveRequest:
        """Persist a new request with status Pending."""

        raise NotImplementedError

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leaves(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        """Newest first. start_from/start_to bound start_date inclusively."""

        raise NotImplementedError

    def update_pending_leave(
        self,
        *,
        request_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        duration: int,
        reason: str,
    ) -> bool:
        """Apply only while the request is still Pending."""

        raise NotImplementedError

    def delete_pending_leave(self, *, request_id: int) -> bool:
        raise NotImplementedError

    def decide_leave(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        action_by: int,
        action_at: datetime,
    ) -> bool:
        """Pending -> status, once. Returns False if the request already left Pending."""

        raise NotImplementedError
