from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence, Tuple

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveBalance, LeaveRequest
from .repository import LeaveRepository

_LEAVE_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, duration,
    reason, status, created_at, action_by, action_at
"""


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        duration=int(r["duration"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r.get("created_at"),
        action_by=r.get("action_by"),
        action_at=r.get("action_at"),
    )


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        year=int(r["year"]),
        annual_leave_balance=int(r["annual_leave_balance"]),
        sick_leave_balance=int(r["sick_leave_balance"]),
        carry_forward=int(r.get("carry_forward") or 0),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Balances --------
    def get_balance(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, employee_id, year, annual_leave_balance, sick_leave_balance, carry_forward
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                """,
                (int(employee_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def create_balance_if_absent(
        self,
        *,
        employee_id: int,
        year: int,
        annual_leave_balance: int,
        sick_leave_balance: int,
        carry_forward: int = 0,
    ) -> Tuple[LeaveBalance, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE relies on uq_leave_balance_employee_year, so concurrent
            # first reads create exactly one row.
            cur.execute(
                """
                INSERT IGNORE INTO leave_balances(
                    employee_id, year, annual_leave_balance, sick_leave_balance, carry_forward
                )
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), int(year), int(annual_leave_balance), int(sick_leave_balance), int(carry_forward)),
            )
            created = cur.rowcount == 1
            cur.execute(
                """
                SELECT balance_id, employee_id, year, annual_leave_balance, sick_leave_balance, carry_forward
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                """,
                (int(employee_id), int(year)),
            )
            return _to_balance(fetchone(cur)), created

    def list_balances(self, *, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, employee_id, year, annual_leave_balance, sick_leave_balance, carry_forward
                FROM leave_balances
                WHERE year=%s
                ORDER BY employee_id
                """,
                (int(year),),
            )
            return [_to_balance(r) for r in fetchall(cur)]

    # -------- Requests --------
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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, leave_type, start_date, end_date, duration, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    int(duration),
                    reason,
                    LeaveStatus.PENDING.value,
                ),
            )
            request_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE request_id=%s", (request_id,))
            return _to_leave(fetchone(cur))

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_leaves(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if statuses is not None:
            values = [s.value for s in statuses]
            if not values:
                return []
            clauses.append(f"status IN ({', '.join(['%s'] * len(values))})")
            params.extend(values)
        if start_from is not None:
            clauses.append("start_date>=%s")
            params.append(start_from)
        if start_to is not None:
            clauses.append("start_date<=%s")
            params.append(start_to)

        where = " AND ".join(clauses)
        sql = f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE {where} ORDER BY created_at DESC, request_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_leave(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET leave_type=%s, start_date=%s, end_date=%s, duration=%s, reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    leave_type.value,
                    start_date,
                    end_date,
                    int(duration),
                    reason,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            if cur.rowcount > 0:
                return True
            # 0 affected rows also happens when the values are unchanged.
            cur.execute(
                "SELECT 1 AS present FROM leave_requests WHERE request_id=%s AND status=%s",
                (int(request_id), LeaveStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def delete_pending_leave(self, *, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_requests WHERE request_id=%s AND status=%s",
                (int(request_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def decide_leave(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        action_by: int,
        action_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, action_by=%s, action_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(action_by), action_at, int(request_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0
