from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..common.datetime_utils import now_local, year_bounds
from ..core.enums import LeaveStatus, LeaveType
from ..employees.repository import EmployeeRepository
from ..settings.model import LeaveQuotas, Settings
from ..settings.service import SettingsProvider
from .model import QUOTA_RULES, BalanceSnapshot, LeaveBalance, LeaveRequest, TypeBalance
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

CONSUMING_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.PENDING)


def build_snapshot(
    balance: LeaveBalance,
    quotas: LeaveQuotas,
    requests: Iterable[LeaveRequest],
    *,
    exclude_request_id: Optional[int] = None,
) -> BalanceSnapshot:
    """Reconcile a balance row against the year's requests.

    Only Approved (used) and Pending (reserved) requests consume balance.
    """

    used: Dict[LeaveType, int] = defaultdict(int)
    pending: Dict[LeaveType, int] = defaultdict(int)
    for req in requests:
        if exclude_request_id is not None and req.request_id == exclude_request_id:
            continue
        if req.status == LeaveStatus.APPROVED:
            used[req.leave_type] += int(req.duration)
        elif req.status == LeaveStatus.PENDING:
            pending[req.leave_type] += int(req.duration)

    balances = {
        leave_type: TypeBalance(
            leave_type=leave_type,
            total=QUOTA_RULES[leave_type].total(leave_type, balance, quotas),
            used=used[leave_type],
            pending=pending[leave_type],
        )
        for leave_type in LeaveType
    }
    return BalanceSnapshot(
        employee_id=balance.employee_id,
        year=balance.year,
        carry_forward=int(balance.carry_forward),
        balances=balances,
    )


class LeaveLedger:
    """Entitlement vs. consumption per employee and year.

    Nothing derived (used/pending/remaining) is cached: every snapshot is
    recomputed from the request set, so approvals need no invalidation.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        settings: SettingsProvider,
        employees: Optional[EmployeeRepository] = None,
    ):
        self._leaves = leaves
        self._settings = settings
        self._employees = employees

    def ensure_balance(self, *, employee_id: int, year: int, settings: Settings) -> LeaveBalance:
        balance = self._leaves.get_balance(employee_id=int(employee_id), year=int(year))
        if balance is not None:
            return balance
        balance, created = self._leaves.create_balance_if_absent(
            employee_id=int(employee_id),
            year=int(year),
            annual_leave_balance=settings.quotas.annual,
            sick_leave_balance=settings.quotas.sick,
            carry_forward=0,
        )
        if created:
            logger.info("Created %s leave balance for employee %s", year, employee_id)
        return balance

    def get_balance_snapshot(
        self,
        employee_id: int,
        year: Optional[int] = None,
        *,
        settings: Optional[Settings] = None,
        exclude_request_id: Optional[int] = None,
    ) -> BalanceSnapshot:
        settings = settings or self._settings.require()
        year = int(year or now_local().year)

        balance = self.ensure_balance(employee_id=employee_id, year=year, settings=settings)
        start, end = year_bounds(year)
        requests = self._leaves.list_leaves(
            employee_id=int(employee_id),
            statuses=CONSUMING_STATUSES,
            start_from=start,
            start_to=end,
        )
        return build_snapshot(balance, settings.quotas, requests, exclude_request_id=exclude_request_id)

    def list_balance_snapshots(self, year: Optional[int] = None) -> List[BalanceSnapshot]:
        """Snapshots for every employee holding a balance row for the year (admin view)."""

        settings = self._settings.require()
        year = int(year or now_local().year)
        start, end = year_bounds(year)

        by_employee: Dict[int, List[LeaveRequest]] = defaultdict(list)
        for req in self._leaves.list_leaves(statuses=CONSUMING_STATUSES, start_from=start, start_to=end):
            by_employee[req.employee_id].append(req)

        return [
            build_snapshot(balance, settings.quotas, by_employee.get(balance.employee_id, []))
            for balance in self._leaves.list_balances(year=year)
        ]

    def initialize_balances(self, year: int) -> int:
        """Create missing balance rows for all active employees.

        Carry-forward is the previous year's unused annual days, capped by the
        settings limit. Existing rows are left untouched. Returns rows created.
        """

        if self._employees is None:
            raise RuntimeError("LeaveLedger.initialize_balances needs an employee repository")

        settings = self._settings.require()
        year = int(year)
        existing = {b.employee_id for b in self._leaves.list_balances(year=year)}
        previous = {b.employee_id: b for b in self._leaves.list_balances(year=year - 1)}

        prev_requests: Dict[int, List[LeaveRequest]] = defaultdict(list)
        if previous:
            start, end = year_bounds(year - 1)
            for req in self._leaves.list_leaves(statuses=CONSUMING_STATUSES, start_from=start, start_to=end):
                prev_requests[req.employee_id].append(req)

        created_count = 0
        for employee in self._employees.list_employees(active_only=True):
            if employee.employee_id in existing:
                continue

            carry_forward = 0
            prior = previous.get(employee.employee_id)
            if prior is not None:
                snapshot = build_snapshot(prior, settings.quotas, prev_requests.get(employee.employee_id, []))
                unused = snapshot[LeaveType.ANNUAL].remaining
                carry_forward = max(0, min(int(settings.carry_forward_limit), unused))

            _, created = self._leaves.create_balance_if_absent(
                employee_id=employee.employee_id,
                year=year,
                annual_leave_balance=settings.quotas.annual,
                sick_leave_balance=settings.quotas.sick,
                carry_forward=carry_forward,
            )
            if created:
                created_count += 1

        logger.info("Initialized %s leave balances for %s", created_count, year)
        return created_count
