# parkdesk/utils/dates.py
"""Local-time calendar helpers shared by the register and cash services."""

import calendar
from datetime import datetime, timedelta


def date_key(moment: datetime) -> str:
    """YYYY-MM-DD for the local calendar day of `moment`."""
    return moment.strftime("%Y-%m-%d")


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def add_one_month(moment: datetime) -> datetime:
    """Same day next month, clamped to the last day (Jan 31 -> Feb 28/29)."""
    year = moment.year + (1 if moment.month == 12 else 0)
    month = 1 if moment.month == 12 else moment.month + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def start_of_week(moment: datetime, first_weekday: int = 6) -> datetime:
    """Start of the week containing `moment`. Weekday numbers follow datetime (Mon=0, Sun=6)."""
    day = start_of_day(moment)
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)
