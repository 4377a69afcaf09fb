from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    InvalidRangeError,
    InvalidStateError,
    InvalidStatusError,
    NotFoundError,
)
from .business_days import compute_business_days
from .ledger import LeaveLedger
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


def _require_range(start_date: date, end_date: date) -> int:
    if end_date < start_date:
        raise InvalidRangeError("End date must be on or after start date")
    duration = compute_business_days(start_date, end_date)
    if duration <= 0:
        raise InvalidRangeError("The selected dates contain no working days")
    return duration


class LeaveService:
    """Use cases around leave requests: admission, edits and approval.

    Admission is serialized per (employee, year) so two concurrent requests
    cannot both spend the same remaining days.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        ledger: LeaveLedger,
        *,
        locks: Optional[KeyedLocks] = None,
    ):
        self._leaves = leaves
        self._ledger = ledger
        self._locks = locks or KeyedLocks()

    def admit_leave_request(
        self,
        *,
        employee_id: int,
        leave_type,
        start_date: date,
        end_date: date,
        reason: str,
    ):
        reason = require_non_empty(reason, "Reason")
        duration = _require_range(start_date, end_date)
        year = start_date.year

        with self._locks.hold((int(employee_id), year)):
            snapshot = self._ledger.get_balance_snapshot(int(employee_id), year)
            lt = LeaveType.parse(leave_type)
            entry = snapshot[lt]

            if duration > entry.remaining:
                raise InsufficientBalanceError(
                    leave_type=lt.value,
                    remaining=entry.remaining,
                    pending=entry.pending,
                    requested=duration,
                )

            leave = self._leaves.create_leave(
                employee_id=int(employee_id),
                leave_type=lt,
                start_date=start_date,
                end_date=end_date,
                duration=duration,
                reason=reason,
            )

        logger.info(
            "Leave request %s admitted: employee=%s type=%s days=%s",
            leave.request_id,
            employee_id,
            lt.value,
            duration,
        )
        return leave

    def update_leave_request(
        self,
        *,
        request_id: int,
        actor_id: int,
        leave_type,
        start_date: date,
        end_date: date,
        reason: str,
    ):
        req = self.get_leave_request(request_id)
        if req.employee_id != int(actor_id):
            raise AuthorizationError("Only the owner can edit a leave request")
        if not req.is_pending:
            raise InvalidStateError("Only pending leave requests can be edited")

        reason = require_non_empty(reason, "Reason")
        duration = _require_range(start_date, end_date)
        year = start_date.year

        with self._locks.hold((req.employee_id, year)):
            # The request's own reservation does not count against itself.
            snapshot = self._ledger.get_balance_snapshot(req.employee_id, year, exclude_request_id=req.request_id)
            lt = LeaveType.parse(leave_type)
            entry = snapshot[lt]
            if duration > entry.remaining:
                raise InsufficientBalanceError(
                    leave_type=lt.value,
                    remaining=entry.remaining,
                    pending=entry.pending,
                    requested=duration,
                )

            ok = self._leaves.update_pending_leave(
                request_id=req.request_id,
                leave_type=lt,
                start_date=start_date,
                end_date=end_date,
                duration=duration,
                reason=reason,
            )
        if not ok:
            raise InvalidStateError("Only pending leave requests can be edited")
        return self.get_leave_request(req.request_id)

    def delete_leave_request(self, *, request_id: int, actor_id: int) -> None:
        req = self.get_leave_request(request_id)
        if req.employee_id != int(actor_id):
            raise AuthorizationError("Only the owner can delete a leave request")
        if not req.is_pending:
            raise InvalidStateError("Only pending leave requests can be deleted")
        if not self._leaves.delete_pending_leave(request_id=req.request_id):
            raise InvalidStateError("Only pending leave requests can be deleted")
        logger.info("Leave request %s deleted by owner", req.request_id)

    def set_status(
        self,
        *,
        request_id: int,
        actor_id: int,
        new_status,
        now: Optional[datetime] = None,
    ):
        """Approve or reject a pending request.

        No balance is touched here; the ledger derives it from request statuses.
        """

        try:
            status = LeaveStatus(new_status)
        except ValueError:
            raise InvalidStatusError(f"Invalid status: {new_status!r}")
        if status not in TERMINAL_STATUSES:
            raise InvalidStatusError(f"Invalid status: {status.value}")

        req = self.get_leave_request(request_id)
        if not req.is_pending:
            raise InvalidStateError("Leave is not pending")

        ok = self._leaves.decide_leave(
            request_id=req.request_id,
            status=status,
            action_by=int(actor_id),
            action_at=now or now_local(),
        )
        if not ok:
            raise InvalidStateError("Leave is not pending")

        logger.info("Leave request %s %s by %s", req.request_id, status.value.lower(), actor_id)
        return self.get_leave_request(req.request_id)

    def get_leave_request(self, request_id: int):
        req = self._leaves.get_leave(request_id=int(request_id))
        if not req:
            raise NotFoundError("Leave not found")
        return req

    def list_leave_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status=None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence:
        statuses = None
        if status is not None:
            try:
                statuses = (LeaveStatus(status),)
            except ValueError:
                raise InvalidStatusError(f"Invalid status: {status!r}")
        return self._leaves.list_leaves(employee_id=employee_id, statuses=statuses, limit=int(limit))
