from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import DuplicatePayrollError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_key, load_json
from .model import LineItem, Payroll
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, month, year, basic_salary, overtime_hours, overtime_rate,
    overtime_amount, allowances, deductions, tax_amount, net_salary, status,
    payment_date, payment_method, remarks, created_at, updated_at
"""


def _items(raw) -> tuple:
    return tuple(
        LineItem(type=i["type"], amount=Decimal(str(i["amount"])), description=i.get("description") or "")
        for i in (load_json(raw) or [])
    )


def _to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        basic_salary=Decimal(r["basic_salary"]),
        overtime_hours=Decimal(r["overtime_hours"]),
        overtime_rate=Decimal(r["overtime_rate"]),
        overtime_amount=Decimal(r["overtime_amount"]),
        allowances=_items(r["allowances"]),
        deductions=_items(r["deductions"]),
        tax_amount=Decimal(r["tax_amount"]),
        net_salary=Decimal(r["net_salary"]),
        status=PayrollStatus(r["status"]),
        payment_date=r.get("payment_date"),
        payment_method=PaymentMethod(r["payment_method"]),
        remarks=r.get("remarks"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _dump_items(items) -> str:
    return dump_json([i.to_dict() for i in items])


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_payroll(self, *, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def find_for_period(self, *, employee_id: int, month: int, year: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls WHERE employee_id=%s AND month=%s AND year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Payroll]:
        clauses = ["1=1"]
        params: list[object] = []
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        sql = (
            f"SELECT {_COLUMNS} FROM payrolls WHERE {' AND '.join(clauses)} "
            "ORDER BY year DESC, month DESC, employee_id"
        )
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_payroll(r) for r in fetchall(cur)]

    def list_created_between(self, *, start: datetime, end: datetime) -> Sequence[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls WHERE created_at>=%s AND created_at<%s ORDER BY created_at",
                (start, end),
            )
            return [_to_payroll(r) for r in fetchall(cur)]

    def create_payroll(self, payroll: Payroll) -> Payroll:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payrolls(
                        employee_id, month, year, basic_salary, overtime_hours, overtime_rate,
                        overtime_amount, allowances, deductions, tax_amount, net_salary, status,
                        payment_date, payment_method, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(payroll.employee_id),
                        int(payroll.month),
                        int(payroll.year),
                        payroll.basic_salary,
                        payroll.overtime_hours,
                        payroll.overtime_rate,
                        payroll.overtime_amount,
                        _dump_items(payroll.allowances),
                        _dump_items(payroll.deductions),
                        payroll.tax_amount,
                        payroll.net_salary,
                        payroll.status.value,
                        payroll.payment_date,
                        payroll.payment_method.value,
                        payroll.remarks,
                    ),
                )
                payroll_id = int(cur.lastrowid)
                cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (payroll_id,))
                return _to_payroll(fetchone(cur))
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicatePayrollError(
                    f"Payroll already exists for employee {payroll.employee_id} in {payroll.month}/{payroll.year}"
                )
            raise

    def update_unless_paid(self, payroll: Payroll) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET basic_salary=%s, allowances=%s, deductions=%s, net_salary=%s, status=%s,
                    payment_date=%s, payment_method=%s, remarks=%s
                WHERE payroll_id=%s AND status<>%s
                """,
                (
                    payroll.basic_salary,
                    _dump_items(payroll.allowances),
                    _dump_items(payroll.deductions),
                    payroll.net_salary,
                    payroll.status.value,
                    payroll.payment_date,
                    payroll.payment_method.value,
                    payroll.remarks,
                    int(payroll.payroll_id),
                    PayrollStatus.PAID.value,
                ),
            )
            if cur.rowcount > 0:
                return True
            # Unchanged values report 0 rows as well.
            cur.execute(
                "SELECT 1 AS present FROM payrolls WHERE payroll_id=%s AND status<>%s",
                (int(payroll.payroll_id), PayrollStatus.PAID.value),
            )
            return fetchone(cur) is not None

    def delete_draft(self, *, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM payrolls WHERE payroll_id=%s AND status=%s",
                (int(payroll_id), PayrollStatus.DRAFT.value),
            )
            return cur.rowcount > 0
