"""Date manipulation utilities"""

from datetime import date, datetime
from dateutil.relativedelta import relativedelta


def as_date(value: date) -> date:
    """Reduce a datetime to its calendar date"""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_months(start: date, months: int) -> date:
    """
    Advance by whole calendar months.

    Days missing from the target month clamp to its last day (Jan 31 + 1 month = Feb 28/29).
    """
    return as_date(start) + relativedelta(months=months)
