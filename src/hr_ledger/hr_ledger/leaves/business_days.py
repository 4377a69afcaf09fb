from __future__ import annotations

from datetime import date

_WORKDAYS_PER_WEEK = 5
_SATURDAY = 5


def compute_business_days(start: date, end: date) -> int:
    """Count days in [start, end] that are not Saturday or Sunday.

    No holiday calendar is consulted. An inverted range counts 0.
    """

    if end < start:
        return 0
    span = (end - start).days + 1
    weeks, rest = divmod(span, 7)
    days = weeks * _WORKDAYS_PER_WEEK
    first = start.weekday()
    # Leftover days run on from start's weekday, wrapping past Sunday.
    days += sum(1 for offset in range(rest) if (first + offset) % 7 < _SATURDAY)
    return days
