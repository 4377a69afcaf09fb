from __future__ import annotations

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hr_ledger.hr_ledger.attendance.model import AttendanceRecord
from src.hr_ledger.hr_ledger.core.enums import AttendanceStatus, PayrollStatus, Role
from src.hr_ledger.hr_ledger.core.exceptions import ConfigurationError, FuturePeriodError
from src.hr_ledger.hr_ledger.employees.model import Employee
from src.hr_ledger.hr_ledger.payroll.generator import PayrollGenerator
from src.hr_ledger.hr_ledger.payroll.model import GenerationOutcome
from src.hr_ledger.hr_ledger.settings.model import PayrollPolicy, Settings
from src.hr_ledger.hr_ledger.settings.service import SettingsProvider


def _employee(eid, *, role=Role.EMPLOYEE, joined=date(2020, 1, 1), salary="3200", active=True):
    return Employee(
        employee_id=eid,
        full_name=f"E{eid}",
        role=role,
        joining_date=joined,
        basic_salary=Decimal(salary),
        is_active=active,
    )


def _att(aid, eid, day, status, hours):
    return AttendanceRecord(
        attendance_id=aid,
        employee_id=eid,
        work_date=day,
        status=status,
        overtime_hours=Decimal(hours),
    )


STAFF = [
    _employee(1, role=Role.ADMIN),
    _employee(2),
    _employee(3, joined=date(2024, 6, 15), salary="3000"),
    _employee(4, joined=date(2024, 7, 1), salary="3000"),
    _employee(5, active=False),
    _employee(6, salary="0"),
]

ROWS = [
    _att(1, 2, date(2024, 6, 3), AttendanceStatus.PRESENT, "5"),
    _att(2, 2, date(2024, 6, 4), AttendanceStatus.LATE, "3"),
    _att(3, 2, date(2024, 6, 5), AttendanceStatus.PRESENT, "3"),
    _att(4, 2, date(2024, 5, 31), AttendanceStatus.PRESENT, "9"),
]


@pytest.fixture
def policy_settings(settings_repo):
    settings_repo.settings = Settings(
        payroll=PayrollPolicy(tax_rate_percent=Decimal("10"), overtime_multiplier=Decimal("1.5"))
    )
    return SettingsProvider(settings_repo)


@pytest.fixture
def attendance(make_attendance_repo):
    return make_attendance_repo(ROWS)


def _generator(payroll_repo, make_employee_repo, attendance, settings, staff=STAFF, workers=4):
    return PayrollGenerator(
        payrolls=payroll_repo,
        employees=make_employee_repo(staff),
        attendance=attendance,
        settings=settings,
        max_workers=workers,
    )


def test_generates_draft_for_each_eligible_employee(
    payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now
):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings)
    result = gen.generate_for_period(month=6, year=2024, now=fixed_now)

    assert result.outcome == GenerationOutcome.CREATED
    by_employee = {p.employee_id: p for p in result.created}
    assert sorted(by_employee) == [2, 3]
    assert {(s.employee_id, s.reason) for s in result.skipped} == {
        (4, "joined after period"),
        (6, "no basic salary"),
    }
    assert result.failed == []
    assert attendance.calls == 1

    full = by_employee[2]
    assert full.status == PayrollStatus.DRAFT
    assert full.overtime_hours == Decimal("8.00")
    assert full.overtime_amount == Decimal("240.00")
    assert full.tax_amount == Decimal("320.00")
    assert full.net_salary == Decimal("3120.00")
    assert full.remarks is None

    joiner = by_employee[3]
    assert joiner.basic_salary == Decimal("1600.00")
    assert joiner.tax_amount == Decimal("160.00")
    assert joiner.net_salary == Decimal("1440.00")
    assert "16 of 30 days" in joiner.remarks


def test_second_run_creates_nothing_and_no_duplicates(
    payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now
):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings)
    gen.generate_for_period(month=6, year=2024, now=fixed_now)

    again = gen.generate_for_period(month=6, year=2024, now=fixed_now)

    assert again.created == []
    assert again.outcome == GenerationOutcome.NOTHING_NEW
    assert {s.employee_id for s in again.skipped if s.reason == "already exists"} == {2, 3}
    assert len(payroll_repo.rows) == 2


def test_concurrent_runs_never_duplicate(payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings)
    results = []

    def _run():
        results.append(gen.generate_for_period(month=6, year=2024, now=fixed_now))

    threads = [threading.Thread(target=_run) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(len(r.created) for r in results) == 2
    keys = [(p.employee_id, p.month, p.year) for p in payroll_repo.rows.values()]
    assert len(keys) == len(set(keys))


def test_duplicate_on_insert_becomes_skip(make_employee_repo, attendance, policy_settings, payroll_repo, fixed_now):
    class RacyRepo(type(payroll_repo)):
        def find_for_period(self, *, employee_id, month, year):
            return None

    repo = RacyRepo()
    gen = _generator(repo, make_employee_repo, attendance, policy_settings, staff=[_employee(2)])
    gen.generate_for_period(month=6, year=2024, now=fixed_now)

    result = gen.generate_for_period(month=6, year=2024, now=fixed_now)

    assert result.outcome == GenerationOutcome.NOTHING_NEW
    assert [(s.employee_id, s.reason) for s in result.skipped] == [(2, "already exists")]
    assert result.failed == []


def test_failure_for_one_employee_does_not_stop_others(
    make_employee_repo, attendance, policy_settings, payroll_repo, fixed_now
):
    class FlakyRepo(type(payroll_repo)):
        def create_payroll(self, payroll):
            if payroll.employee_id == 3:
                raise RuntimeError("connection lost")
            return super().create_payroll(payroll)

    repo = FlakyRepo()
    result = _generator(repo, make_employee_repo, attendance, policy_settings).generate_for_period(
        month=6, year=2024, now=fixed_now
    )

    assert [p.employee_id for p in result.created] == [2]
    assert [(f.employee_id, f.reason) for f in result.failed] == [(3, "connection lost")]
    assert "1 failed" in result.message


def test_future_period_is_rejected(payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings)
    with pytest.raises(FuturePeriodError):
        gen.generate_for_period(month=7, year=2024, now=fixed_now)
    with pytest.raises(FuturePeriodError):
        gen.generate_for_period(month=1, year=2025, now=fixed_now)
    assert payroll_repo.rows == {}


def test_past_period_is_allowed(payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings)
    result = gen.generate_for_period(month=12, year=2023, now=fixed_now)
    assert [p.employee_id for p in result.created] == [2]


def test_missing_settings_is_configuration_error(payroll_repo, make_employee_repo, attendance, settings_repo, fixed_now):
    settings_repo.settings = None
    gen = _generator(payroll_repo, make_employee_repo, attendance, SettingsProvider(settings_repo))
    with pytest.raises(ConfigurationError):
        gen.generate_for_period(month=6, year=2024, now=fixed_now)


def test_no_eligible_employees_is_distinct_outcome(
    payroll_repo, make_employee_repo, attendance, policy_settings, fixed_now
):
    staff = [_employee(1, role=Role.ADMIN), _employee(2, joined=None)]
    result = _generator(payroll_repo, make_employee_repo, attendance, policy_settings, staff=staff).generate_for_period(
        month=6, year=2024, now=fixed_now
    )

    assert result.outcome == GenerationOutcome.NO_ELIGIBLE_EMPLOYEES
    assert result.created == []
    assert attendance.calls == 0


def test_result_to_dict(payroll_repo, make_employee_repo, attendance, policy_settings):
    gen = _generator(payroll_repo, make_employee_repo, attendance, policy_settings, workers=1)
    data = gen.generate_for_period(month=6, year=2024, now=datetime(2024, 6, 30, 18, 0)).to_dict()

    assert data["outcome"] == "created"
    assert data["created"][0]["deductions"] == [
        {"type": "tax", "amount": "320.00", "description": "Income tax (10%)"}
    ]
