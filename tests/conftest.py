from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from src.hr_ledger.hr_ledger.core.enums import LeaveStatus, PayrollStatus
from src.hr_ledger.hr_ledger.core.exceptions import DuplicatePayrollError
from src.hr_ledger.hr_ledger.leaves.model import LeaveBalance, LeaveRequest
from src.hr_ledger.hr_ledger.settings.model import Settings
from src.hr_ledger.hr_ledger.settings.service import SettingsProvider


class FakeSettingsRepo:
    def __init__(self, settings=None):
        self.settings = settings
        self.reads = 0

    def get_settings(self):
        self.reads += 1
        return self.settings

    def create_settings(self, settings):
        if self.settings is not None:
            return False
        self.settings = settings
        return True

    def update_settings(self, settings):
        if self.settings is None:
            return False
        self.settings = settings
        return True


class FakeEmployeeRepo:
    def __init__(self, employees=()):
        self._employees = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._employees.get(int(employee_id))

    def list_employees(self, *, active_only=True):
        return [e for e in self._employees.values() if e.is_active or not active_only]


class FakeAttendanceRepo:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.calls = 0

    def find_attendance(self, *, start_date, end_date, employee_id=None):
        self.calls += 1
        return [
            r
            for r in self.rows
            if start_date <= r.work_date <= end_date and (employee_id is None or r.employee_id == employee_id)
        ]


class FakeLeaveRepo:
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.balances = {}
        self.requests = {}

    def get_balance(self, *, employee_id, year):
        return self.balances.get((int(employee_id), int(year)))

    def create_balance_if_absent(self, *, employee_id, year, annual_leave_balance, sick_leave_balance, carry_forward=0):
        key = (int(employee_id), int(year))
        with self._lock:
            if key in self.balances:
                return self.balances[key], False
            row = LeaveBalance(
                employee_id=key[0],
                year=key[1],
                annual_leave_balance=int(annual_leave_balance),
                sick_leave_balance=int(sick_leave_balance),
                carry_forward=int(carry_forward),
                balance_id=len(self.balances) + 1,
            )
            self.balances[key] = row
            return row, True

    def list_balances(self, *, year):
        return sorted((b for (_, y), b in self.balances.items() if y == int(year)), key=lambda b: b.employee_id)

    def create_leave(self, *, employee_id, leave_type, start_date, end_date, duration, reason):
        with self._lock:
            rid = self._next_id
            self._next_id += 1
            row = LeaveRequest(
                request_id=rid,
                employee_id=int(employee_id),
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                duration=int(duration),
                reason=reason,
                status=LeaveStatus.PENDING,
                created_at=datetime(2024, 1, 1, 9, 0) + timedelta(minutes=rid),
            )
            self.requests[rid] = row
            return row

    def add(self, request: LeaveRequest):
        """Store a request as-is (test setup)."""
        with self._lock:
            self.requests[request.request_id] = request
            self._next_id = max(self._next_id, request.request_id + 1)
        return request

    def get_leave(self, *, request_id):
        return self.requests.get(int(request_id))

    def list_leaves(self, *, employee_id=None, statuses=None, start_from=None, start_to=None, limit=None):
        statuses = set(statuses) if statuses is not None else None
        with self._lock:
            current = list(self.requests.values())
        rows = [
            r
            for r in current
            if (employee_id is None or r.employee_id == int(employee_id))
            and (statuses is None or r.status in statuses)
            and (start_from is None or r.start_date >= start_from)
            and (start_to is None or r.start_date <= start_to)
        ]
        rows.sort(key=lambda r: (r.created_at or datetime.min, r.request_id), reverse=True)
        return rows[:limit] if limit is not None else rows

    def update_pending_leave(self, *, request_id, leave_type, start_date, end_date, duration, reason):
        req = self.requests.get(int(request_id))
        if not req or req.status != LeaveStatus.PENDING:
            return False
        self.requests[req.request_id] = replace(
            req, leave_type=leave_type, start_date=start_date, end_date=end_date, duration=int(duration), reason=reason
        )
        return True

    def delete_pending_leave(self, *, request_id):
        req = self.requests.get(int(request_id))
        if not req or req.status != LeaveStatus.PENDING:
            return False
        del self.requests[req.request_id]
        return True

    def decide_leave(self, *, request_id, status, action_by, action_at):
        req = self.requests.get(int(request_id))
        if not req or req.status != LeaveStatus.PENDING:
            return False
        self.requests[req.request_id] = replace(req, status=status, action_by=int(action_by), action_at=action_at)
        return True


class FakePayrollRepo:
    def __init__(self, *, created_at=None):
        self._lock = threading.Lock()
        self._next_id = 1
        self.rows = {}
        self.created_at = created_at or datetime(2024, 6, 14, 10, 0)

    def _key(self, p):
        return (p.employee_id, p.month, p.year)

    def get_payroll(self, *, payroll_id):
        return self.rows.get(int(payroll_id))

    def _snapshot(self):
        with self._lock:
            return list(self.rows.values())

    def find_for_period(self, *, employee_id, month, year):
        for p in self._snapshot():
            if self._key(p) == (int(employee_id), int(month), int(year)):
                return p
        return None

    def list_payrolls(self, *, month=None, year=None, employee_id=None, limit=None):
        rows = [
            p
            for p in self._snapshot()
            if (month is None or p.month == int(month))
            and (year is None or p.year == int(year))
            and (employee_id is None or p.employee_id == int(employee_id))
        ]
        rows.sort(key=lambda p: (-p.year, -p.month, p.employee_id))
        return rows[:limit] if limit is not None else rows

    def list_created_between(self, *, start, end):
        return [p for p in self._snapshot() if p.created_at and start <= p.created_at < end]

    def create_payroll(self, payroll):
        with self._lock:
            if any(self._key(p) == self._key(payroll) for p in self.rows.values()):
                raise DuplicatePayrollError("Payroll already exists")
            pid = self._next_id
            self._next_id += 1
            row = replace(payroll, payroll_id=pid, created_at=self.created_at, updated_at=self.created_at)
            self.rows[pid] = row
            return row

    def add(self, payroll):
        """Store a payroll as-is (test setup)."""
        with self._lock:
            pid = payroll.payroll_id or self._next_id
            self._next_id = max(self._next_id, pid + 1)
            row = replace(payroll, payroll_id=pid, created_at=payroll.created_at or self.created_at)
            self.rows[pid] = row
            return row

    def update_unless_paid(self, payroll):
        current = self.rows.get(int(payroll.payroll_id))
        if not current or current.status == PayrollStatus.PAID:
            return False
        self.rows[current.payroll_id] = payroll
        return True

    def delete_draft(self, *, payroll_id):
        current = self.rows.get(int(payroll_id))
        if not current or current.status != PayrollStatus.DRAFT:
            return False
        del self.rows[current.payroll_id]
        return True


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 14, 10, 0, 0)


@pytest.fixture
def settings_repo():
    return FakeSettingsRepo(Settings())


@pytest.fixture
def settings_provider(settings_repo):
    return SettingsProvider(settings_repo)


@pytest.fixture
def leave_repo():
    return FakeLeaveRepo()


@pytest.fixture
def payroll_repo():
    return FakePayrollRepo()


@pytest.fixture
def make_employee_repo():
    return FakeEmployeeRepo


@pytest.fixture
def make_attendance_repo():
    return FakeAttendanceRepo
