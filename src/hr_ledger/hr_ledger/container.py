from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .common.locks import KeyedLocks
from .core.constants import DEFAULT_PAYROLL_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .leaves.ledger import LeaveLedger
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.aggregator import PayrollAggregator
from .payroll.generator import PayrollGenerator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsProvider, SettingsService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    settings_repo: MySQLSettingsRepository
    employees_repo: MySQLEmployeeRepository
    attendance_repo: MySQLAttendanceRepository
    leaves_repo: MySQLLeaveRepository
    payrolls_repo: MySQLPayrollRepository

    settings_provider: SettingsProvider
    settings_service: SettingsService
    leave_ledger: LeaveLedger
    leave_service: LeaveService
    payroll_service: PayrollService
    payroll_generator: PayrollGenerator
    payroll_aggregator: PayrollAggregator


def build_container(*, db_config: dict, payroll_workers: int = DEFAULT_PAYROLL_WORKERS) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connect_timeout=int(db_config.get("connect_timeout", 10)),
    )
    conn = DatabaseConnection.get_instance(config)

    settings_repo = MySQLSettingsRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    payrolls_repo = MySQLPayrollRepository(conn)

    settings_provider = SettingsProvider(settings_repo)
    settings_service = SettingsService(settings_repo, settings_provider)
    leave_ledger = LeaveLedger(leaves_repo, settings_provider, employees_repo)
    leave_service = LeaveService(leaves_repo, leave_ledger, locks=KeyedLocks())
    payroll_service = PayrollService(payrolls_repo, employees_repo, settings_provider)
    payroll_generator = PayrollGenerator(
        payrolls=payrolls_repo,
        employees=employees_repo,
        attendance=attendance_repo,
        settings=settings_provider,
        max_workers=payroll_workers,
    )
    payroll_aggregator = PayrollAggregator(payrolls_repo)

    return Container(
        conn=conn,
        settings_repo=settings_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payrolls_repo=payrolls_repo,
        settings_provider=settings_provider,
        settings_service=settings_service,
        leave_ledger=leave_ledger,
        leave_service=leave_service,
        payroll_service=payroll_service,
        payroll_generator=payroll_generator,
        payroll_aggregator=payroll_aggregator,
    )
