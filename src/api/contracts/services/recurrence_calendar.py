"""
Billing-date generation for recurring contracts.

The calendar is a pure function of its inputs: every call returns a fresh
lazy iterator, so it can be restarted at will.
"""
from datetime import date
from typing import Iterator, List, Optional

from src.api.common.config import get_settings
from src.api.common.constants.contracts import RecurrencePeriod
from src.api.common.exceptions import ValidationError
from src.api.common.utils.datetime import day_in_month, shift_month


def billing_date_at(anchor_date: date, billing_day: int, months: int) -> date:
    """Billing date `months` months after the anchor month."""
    year, month = shift_month(anchor_date.year, anchor_date.month, months)
    return day_in_month(year, month, billing_day)


def generate_billing_dates(anchor_date: date,
                           billing_day: int,
                           period: RecurrencePeriod,
                           end_date: Optional[date] = None,
                           max_occurrences: Optional[int] = None) -> Iterator[date]:
    """
    Yield billing dates on `billing_day` every `period`, starting after the anchor.

    The first occurrence is always strictly after `anchor_date`: when the
    billing day of the anchor month is on or before the anchor day, the
    series starts one period later. Dates are yielded while they are on or
    before `end_date`, and at most `max_occurrences` of them. Without an end
    date and without an explicit cap the configured default cap (12) applies.

    The day is re-derived from `billing_day` for every occurrence, so a
    billing day of 31 yields Jan 31, Feb 29, Mar 31 rather than drifting.
    """
    if not 1 <= billing_day <= 31:
        raise ValidationError(f"Billing day must be between 1 and 31, got: {billing_day}")
    if max_occurrences is not None and max_occurrences < 1:
        raise ValidationError(f"max_occurrences must be positive, got: {max_occurrences}")
    if end_date is None and max_occurrences is None:
        max_occurrences = get_settings().max_open_ended_occurrences

    step = RecurrencePeriod(period).months
    offset = 0
    if billing_date_at(anchor_date, billing_day, offset) <= anchor_date:
        offset += step

    emitted = 0
    while max_occurrences is None or emitted < max_occurrences:
        candidate = billing_date_at(anchor_date, billing_day, offset)
        if end_date is not None and candidate > end_date:
            return
        yield candidate
        emitted += 1
        offset += step


def billing_dates(anchor_date: date,
                  billing_day: int,
                  period: RecurrencePeriod,
                  end_date: Optional[date] = None,
                  max_occurrences: Optional[int] = None) -> List[date]:
    """Materialized variant of generate_billing_dates."""
    return list(generate_billing_dates(
        anchor_date, billing_day, period, end_date, max_occurrences))
