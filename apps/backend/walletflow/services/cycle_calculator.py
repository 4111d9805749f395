"""Due-date predicate and next-occurrence calculation for fixed sources.

Everything here is a pure function of the source's schedule fields and an
explicit reference date.
"""

from __future__ import annotations

import calendar
from datetime import date

from walletflow import models

QUARTER_START_MONTHS = (1, 4, 7, 10)


def _add_month(year: int, month: int, delta: int) -> tuple[int, int]:
    total = year * 12 + (month - 1) + delta
    new_year = total // 12
    new_month = total % 12 + 1
    return new_year, new_month


def _clamp_day(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def is_due(source: models.FinancialSource, reference_date: date) -> bool:
    if not source.is_fixed or source.cycle_day_of_month is None or source.cycle_period is None:
        return False
    if source.last_processed_on is not None and source.last_processed_on >= reference_date:
        return False
    if reference_date.day != source.cycle_day_of_month:
        return False

    period = models.CyclePeriod(source.cycle_period)
    if period is models.CyclePeriod.QUARTERLY:
        return reference_date.month in QUARTER_START_MONTHS
    if period is models.CyclePeriod.YEARLY:
        return source.next_due_date is None or source.next_due_date <= reference_date
    return True


def next_occurrence(source: models.FinancialSource, reference_date: date) -> date:
    """Return the nearest occurrence strictly after ``reference_date``.

    Days past the end of a short month clamp to its last day.
    """
    day = int(source.cycle_day_of_month or reference_date.day)
    period = models.CyclePeriod(source.cycle_period or models.CyclePeriod.MONTHLY)
    year, month = reference_date.year, reference_date.month

    if period is models.CyclePeriod.MONTHLY:
        candidate = _clamp_day(year, month, day)
        if candidate <= reference_date:
            candidate = _clamp_day(*_add_month(year, month, 1), day)
        return candidate

    if period is models.CyclePeriod.QUARTERLY:
        quarter_month = ((month - 1) // 3) * 3 + 1
        candidate = _clamp_day(year, quarter_month, day)
        if candidate <= reference_date:
            candidate = _clamp_day(*_add_month(year, quarter_month, 3), day)
        return candidate

    # yearly: anchored on January
    candidate = _clamp_day(year, 1, day)
    if candidate <= reference_date:
        candidate = _clamp_day(year + 1, 1, day)
    return candidate
