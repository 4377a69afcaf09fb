from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..common.datetime_utils import first_of_next_month, now_local
from ..common.money import ZERO, quantize
from ..core.constants import DEFAULT_STATS_LIMIT
from .model import CompanyTotals, EmployeeHistory, MonthlyTotal
from .repository import PayrollRepository


class PayrollAggregator:
    """Read-only payroll reporting."""

    def __init__(self, payrolls: PayrollRepository):
        self._payrolls = payrolls

    def monthly_totals(self, limit: int = DEFAULT_STATS_LIMIT) -> List[MonthlyTotal]:
        groups: Dict[Tuple[int, int], List[Decimal]] = {}
        for p in self._payrolls.list_payrolls():
            groups.setdefault((p.year, p.month), []).append(p.net_salary)

        out = []
        for (year, month) in sorted(groups, reverse=True)[: max(0, int(limit))]:
            nets = groups[(year, month)]
            total = sum(nets, ZERO)
            out.append(
                MonthlyTotal(
                    month=month,
                    year=year,
                    total_payout=quantize(total),
                    count=len(nets),
                    avg_salary=quantize(total / len(nets)),
                )
            )
        return out

    def current_month_company_totals(self, now: Optional[datetime] = None) -> CompanyTotals:
        """Totals over payroll rows created in the current calendar month.

        Deductions are every deduction line plus tax_amount on top.
        """

        now = now or now_local()
        start = datetime(now.year, now.month, 1)
        nxt = first_of_next_month(now.year, now.month)
        end = datetime(nxt.year, nxt.month, 1)

        gross = ZERO
        deductions = ZERO
        rows = self._payrolls.list_created_between(start=start, end=end)
        for p in rows:
            gross += p.basic_salary + p.total_allowances + p.overtime_amount
            deductions += p.total_deductions + p.tax_amount

        return CompanyTotals(
            total_payroll=quantize(gross - deductions),
            total_deductions=quantize(deductions),
            employee_count=len(rows),
        )

    def employee_history(self, employee_id: int) -> EmployeeHistory:
        payrolls = list(self._payrolls.list_payrolls(employee_id=int(employee_id)))
        payrolls.sort(key=lambda p: (p.year, p.month), reverse=True)
        return EmployeeHistory(
            employee_id=int(employee_id),
            payrolls=payrolls,
            total_net=quantize(sum((p.net_salary for p in payrolls), ZERO)),
        )
