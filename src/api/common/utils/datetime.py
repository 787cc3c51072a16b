import calendar
from datetime import date, datetime, timezone, timedelta


def get_current_datetime() -> datetime:
    """Return current UTC datetime with timezone info."""
    dt = datetime.now(timezone.utc)
    # Ensure microseconds are stripped for consistency in tests
    return dt.replace(microsecond=0)


def get_current_date() -> date:
    return get_current_datetime().date()


def get_month_boundaries(target_month: date) -> tuple[date, date]:
    """
    Get the start and end dates for a given month.

    Args:
        target_month: Any day inside the month

    Returns:
        Tuple of (month_start, month_end) dates
    """
    return get_month_start(target_month), get_month_end(target_month)


def get_month_start(target_month: date) -> date:
    """Get the first day of the given month."""
    return target_month.replace(day=1)


def get_month_end(target_month: date) -> date:
    """Get the last day of the given month."""
    if target_month.month == 12:
        return date(target_month.year + 1, 1, 1) - timedelta(days=1)
    return date(target_month.year, target_month.month + 1, 1) - timedelta(days=1)


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Move a (year, month) pair by a number of months."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def day_in_month(year: int, month: int, day: int) -> date:
    """
    Build a date on the requested day, clamped to the month's last day
    (a billing day of 31 falls on Feb 28/29, Apr 30, ...).
    """
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))
