from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from src.hr_ledger.hr_ledger.payroll.aggregator import PayrollAggregator
from src.hr_ledger.hr_ledger.payroll.model import LineItem, Payroll


def _payroll(employee_id, month, year, net, *, basic=None, **extra):
    return Payroll(
        employee_id=employee_id,
        month=month,
        year=year,
        basic_salary=basic if basic is not None else Decimal(net),
        net_salary=Decimal(net),
        **extra,
    )


def test_monthly_totals_grouped_and_newest_first(payroll_repo):
    payroll_repo.add(_payroll(1, 6, 2024, "1000"))
    payroll_repo.add(_payroll(2, 6, 2024, "2000"))
    payroll_repo.add(_payroll(1, 5, 2024, "500"))
    payroll_repo.add(_payroll(1, 12, 2023, "700"))

    totals = PayrollAggregator(payroll_repo).monthly_totals()

    assert [(t.year, t.month) for t in totals] == [(2024, 6), (2024, 5), (2023, 12)]
    june = totals[0]
    assert june.total_payout == Decimal("3000.00")
    assert june.count == 2
    assert june.avg_salary == Decimal("1500.00")


def test_monthly_totals_limit(payroll_repo):
    for month in range(1, 13):
        payroll_repo.add(_payroll(1, month, 2023, "100"))
    payroll_repo.add(_payroll(1, 1, 2024, "100"))

    totals = PayrollAggregator(payroll_repo).monthly_totals(limit=12)

    assert len(totals) == 12
    assert (totals[0].year, totals[0].month) == (2024, 1)
    assert (totals[-1].year, totals[-1].month) == (2023, 2)


def test_company_totals_add_tax_amount_to_all_deduction_lines(payroll_repo, fixed_now):
    payroll_repo.add(
        _payroll(
            1,
            6,
            2024,
            "1030",
            basic=Decimal("1000"),
            allowances=(LineItem("housing", Decimal("100")),),
            overtime_amount=Decimal("50"),
            deductions=(LineItem("tax", Decimal("100")), LineItem("insurance", Decimal("20"))),
            tax_amount=Decimal("100"),
        )
    )
    payroll_repo.add(
        _payroll(
            2,
            6,
            2024,
            "1800",
            basic=Decimal("2000"),
            deductions=(LineItem("tax", Decimal("200")),),
            tax_amount=Decimal("200"),
        )
    )
    payroll_repo.add(_payroll(3, 5, 2024, "999", created_at=datetime(2024, 5, 31, 23, 59)))

    totals = PayrollAggregator(payroll_repo).current_month_company_totals(fixed_now)

    assert totals.employee_count == 2
    assert totals.total_deductions == Decimal("620.00")
    assert totals.total_payroll == Decimal("2530.00")


def test_company_totals_empty_month(payroll_repo):
    totals = PayrollAggregator(payroll_repo).current_month_company_totals(datetime(2030, 1, 1))
    assert totals.to_dict() == {"totalPayroll": "0.00", "totalDeductions": "0.00", "employeeCount": 0}


def test_employee_history(payroll_repo):
    payroll_repo.add(_payroll(1, 4, 2024, "100"))
    payroll_repo.add(_payroll(1, 5, 2024, "150.50"))
    payroll_repo.add(_payroll(2, 5, 2024, "999"))

    history = PayrollAggregator(payroll_repo).employee_history(1)

    assert [p.month for p in history.payrolls] == [5, 4]
    assert history.total_net == Decimal("250.50")


def test_company_totals_single_taxed_row(payroll_repo, fixed_now):
    payroll_repo.add(
        _payroll(
            1,
            6,
            2024,
            "900",
            basic=Decimal("1000"),
            deductions=(LineItem("tax", Decimal("100")),),
            tax_amount=Decimal("100"),
        )
    )

    totals = PayrollAggregator(payroll_repo).current_month_company_totals(fixed_now)

    assert totals.to_dict() == {"totalPayroll": "800.00", "totalDeductions": "200.00", "employeeCount": 1}
