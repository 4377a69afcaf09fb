from datetime import date

import pytest

from src.hr_ledger.hr_ledger.leaves.business_days import compute_business_days


def test_single_weekday_counts_one():
    assert compute_business_days(date(2024, 6, 3), date(2024, 6, 3)) == 1


def test_monday_to_friday_is_five():
    assert compute_business_days(date(2024, 6, 3), date(2024, 6, 7)) == 5


@pytest.mark.parametrize(
    "start,end",
    [
        (date(2024, 6, 8), date(2024, 6, 8)),
        (date(2024, 6, 9), date(2024, 6, 9)),
        (date(2024, 6, 8), date(2024, 6, 9)),
    ],
)
def test_weekend_only_range_is_zero(start, end):
    assert compute_business_days(start, end) == 0


def test_range_spanning_weekend_skips_it():
    # Fri 7th .. Tue 11th -> Fri, Mon, Tue
    assert compute_business_days(date(2024, 6, 7), date(2024, 6, 11)) == 3


def test_end_before_start_is_zero():
    assert compute_business_days(date(2024, 6, 7), date(2024, 6, 3)) == 0


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2024, 6, 5), date(2024, 6, 18), 10),
        (date(2024, 6, 8), date(2024, 6, 14), 5),
        (date(2024, 6, 6), date(2024, 6, 16), 7),
        (date(2024, 1, 1), date(2024, 12, 31), 262),
        (date(2000, 1, 1), date(2099, 12, 31), 26089),
    ],
)
def test_long_ranges_count_weeks_and_remainder(start, end, expected):
    assert compute_business_days(start, end) == expected
