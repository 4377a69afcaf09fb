from datetime import date
from decimal import Decimal

from src.hr_ledger.hr_ledger.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.hr_ledger.hr_ledger.payroll.model import LineItem
from src.hr_ledger.hr_ledger.settings.model import PayrollPolicy


def test_joining_mid_month_prorates_inclusive_of_joining_day():
    calc = StandardPayrollCalculator()
    p = calc.prorate(Decimal("3000"), date(2024, 6, 15), month=6, year=2024)

    assert p.prorated is True
    assert (p.days_worked, p.days_in_month) == (16, 30)
    assert p.amount == Decimal("1600.00")


def test_january_joiner_on_the_tenth():
    calc = StandardPayrollCalculator()
    p = calc.prorate(Decimal("3100"), date(2024, 1, 10), month=1, year=2024)
    assert p.amount == Decimal("2200.00")
    assert p.days_worked == 22


def test_joining_on_or_before_the_first_pays_full_salary():
    calc = StandardPayrollCalculator()
    assert calc.prorate(Decimal("3000"), date(2024, 6, 1), month=6, year=2024).prorated is False
    full = calc.prorate(Decimal("3000"), date(2019, 3, 20), month=6, year=2024)
    assert full.amount == Decimal("3000.00")
    assert full.prorated is False


def test_overtime_uses_160_hour_month_and_multiplier():
    calc = StandardPayrollCalculator()
    assert calc.overtime_amount(Decimal("1600"), Decimal("10"), Decimal("1.5")) == Decimal("150.00")
    assert calc.overtime_amount(Decimal("1600"), Decimal("0"), Decimal("1.5")) == Decimal("0")


def test_tax_is_percentage_of_taxable_amount():
    calc = StandardPayrollCalculator()
    assert calc.tax_amount(Decimal("2200"), Decimal("10")) == Decimal("220.00")
    assert calc.tax_amount(Decimal("1234.56"), Decimal("12.5")) == Decimal("154.32")


def test_breakdown_net_salary():
    calc = StandardPayrollCalculator()
    pay = calc.breakdown(
        basic_salary=Decimal("3200"),
        joining_date=date(2020, 1, 1),
        month=6,
        year=2024,
        overtime_hours=Decimal("8"),
        policy=PayrollPolicy(tax_rate_percent=Decimal("10"), overtime_multiplier=Decimal("1.5")),
    )

    assert pay.overtime_amount == Decimal("240.00")
    assert pay.tax_amount == Decimal("320.00")
    assert pay.allowances == ()
    assert [(d.type, d.amount) for d in pay.deductions] == [("tax", Decimal("320.00"))]
    assert pay.net_salary == Decimal("3120.00")


def test_breakdown_omits_zero_lines_and_replaces_entered_tax():
    calc = StandardPayrollCalculator()
    pay = calc.breakdown(
        basic_salary=Decimal("1000"),
        joining_date=None,
        month=6,
        year=2024,
        overtime_hours=Decimal("0"),
        policy=PayrollPolicy(tax_rate_percent=Decimal("0")),
        allowances=(LineItem("housing", Decimal("100.00")),),
        extra_deductions=(LineItem("tax", Decimal("999.00")), LineItem("insurance", Decimal("50.00"))),
    )

    assert pay.tax_amount == Decimal("0.00")
    assert [d.type for d in pay.deductions] == ["insurance"]
    assert pay.net_salary == Decimal("1050.00")


def test_joining_after_the_month_pays_nothing():
    calc = StandardPayrollCalculator()
    p = calc.prorate(Decimal("3100"), date(2024, 3, 20), month=1, year=2024)
    assert p.amount == Decimal("0.00")
    assert p.days_worked == 0
    assert calc.prorate(Decimal("3100"), date(2024, 2, 1), month=1, year=2024).days_worked == 0
