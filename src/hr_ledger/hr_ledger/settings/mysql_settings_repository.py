from __future__ import annotations

from decimal import Decimal
from typing import Optional

from mysql.connector.errors import IntegrityError

from ..core.enums import PayrollCycle
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_duplicate_key
from .model import LeaveQuotas, PayrollPolicy, Settings
from .repository import SettingsRepository

_COLUMNS = """
    annual_leave_quota, sick_leave_quota, personal_leave_quota,
    maternity_leave_quota, paternity_leave_quota, unpaid_leave_quota,
    carry_forward_limit, tax_rate_percent, overtime_multiplier, pay_day, payroll_cycle
"""


def _params(s: Settings) -> tuple:
    return (
        int(s.quotas.annual),
        int(s.quotas.sick),
        int(s.quotas.personal),
        int(s.quotas.maternity),
        int(s.quotas.paternity),
        int(s.quotas.unpaid),
        int(s.carry_forward_limit),
        s.payroll.tax_rate_percent,
        s.payroll.overtime_multiplier,
        int(s.payroll.pay_day),
        s.payroll.cycle.value,
    )


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_settings(self) -> Optional[Settings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS}, updated_at FROM settings WHERE id=1")
            r = fetchone(cur)
            if not r:
                return None
            return Settings(
                quotas=LeaveQuotas(
                    annual=int(r["annual_leave_quota"]),
                    sick=int(r["sick_leave_quota"]),
                    personal=int(r["personal_leave_quota"]),
                    maternity=int(r["maternity_leave_quota"]),
                    paternity=int(r["paternity_leave_quota"]),
                    unpaid=int(r["unpaid_leave_quota"]),
                ),
                carry_forward_limit=int(r["carry_forward_limit"]),
                payroll=PayrollPolicy(
                    tax_rate_percent=Decimal(r["tax_rate_percent"]),
                    overtime_multiplier=Decimal(r["overtime_multiplier"]),
                    pay_day=int(r["pay_day"]),
                    cycle=PayrollCycle(r["payroll_cycle"]),
                ),
                updated_at=r.get("updated_at"),
            )

    def create_settings(self, settings: Settings) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO settings(id, {_COLUMNS})
                    VALUES(1,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(settings),
                )
                return True
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                return False
            raise

    def update_settings(self, settings: Settings) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE settings
                SET annual_leave_quota=%s, sick_leave_quota=%s, personal_leave_quota=%s,
                    maternity_leave_quota=%s, paternity_leave_quota=%s, unpaid_leave_quota=%s,
                    carry_forward_limit=%s, tax_rate_percent=%s, overtime_multiplier=%s,
                    pay_day=%s, payroll_cycle=%s
                WHERE id=1
                """,
                _params(settings),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when nothing changed.
            cur.execute("SELECT 1 AS present FROM settings WHERE id=1")
            return fetchone(cur) is not None
