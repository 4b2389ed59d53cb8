# tests/test_income_service.py
"""Unit tests for income statistics and cash movement filters."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from parkdesk.schemas.records import CashWithdrawal, IncomeRecord, PaymentKind, VehicleKind
from parkdesk.services.income_service import (
    filter_withdrawals,
    income_for_period,
    income_for_range,
    period_bounds,
    recent_income,
    today_income_total,
)

# Wednesday
NOW = datetime(2026, 10, 21, 15, 0)


def record(ts, amount, kind=PaymentKind.TIME_BASED, vehicle=VehicleKind.CAR, id_=None):
    return IncomeRecord(id=id_ or f"income_{ts:%m%d%H%M}", timestamp=ts, plate="ABC123",
                        vehicle_kind=vehicle, payment_kind=kind, amount=amount,
                        entry_timestamp=ts, exit_timestamp=ts)


def withdrawal(ts, amount=100):
    return CashWithdrawal(id=f"withdraw_{ts:%m%d}", timestamp=ts, date_key=f"{ts:%Y-%m-%d}", amount=amount)


RECORDS = [
    record(datetime(2026, 10, 21, 9, 0), 3200),
    record(datetime(2026, 10, 21, 10, 0), 100000, PaymentKind.MONTHLY),
    record(datetime(2026, 10, 20, 10, 0), 1000, vehicle=VehicleKind.MOTORCYCLE),
    record(datetime(2026, 10, 18, 8, 0), 25000, PaymentKind.DAILY),   # Sunday
    record(datetime(2026, 10, 17, 8, 0), 8000, PaymentKind.EVENT),    # Saturday
    record(datetime(2026, 9, 30, 23, 59), 1600),
    record(datetime(2025, 12, 31, 12, 0), 2400),
]


class TestPeriodBounds:
    def test_week_starts_on_sunday(self):
        start, end = period_bounds("week", NOW)
        assert start == datetime(2026, 10, 18)
        assert end == datetime(2026, 10, 25)

    def test_month_in_december_rolls_year(self):
        start, end = period_bounds("month", datetime(2026, 12, 5))
        assert (start, end) == (datetime(2026, 12, 1), datetime(2027, 1, 1))

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            period_bounds("decade", NOW)


class TestIncomeStats:
    def test_day(self):
        stats = income_for_period(RECORDS, "day", NOW)
        assert stats.total == 103200
        assert stats.count == 2
        assert stats.by_payment_kind["monthly"] == 100000
        assert stats.by_payment_kind["time_based"] == 3200
        assert stats.by_payment_kind["daily"] == 0

    def test_week(self):
        stats = income_for_period(RECORDS, "week", NOW)
        assert stats.total == 103200 + 1000 + 25000
        assert stats.by_vehicle_kind["motorcycle"] == 1000

    def test_month_and_year(self):
        assert income_for_period(RECORDS, "month", NOW).total == 103200 + 1000 + 25000 + 8000
        assert income_for_period(RECORDS, "year", NOW).total == 103200 + 1000 + 25000 + 8000 + 1600

    def test_range_is_inclusive(self):
        stats = income_for_range(RECORDS, datetime(2026, 10, 17, 8, 0), datetime(2026, 10, 20, 10, 0))
        assert stats.total == 8000 + 25000 + 1000

    def test_today_total(self):
        assert today_income_total(RECORDS, NOW) == 103200
        assert today_income_total([], NOW) == 0


class TestMovements:
    def test_recent_income_newest_first(self):
        latest = recent_income(RECORDS, limit=2)
        assert [r.amount for r in latest] == [100000, 3200]

    def test_recent_income_since(self):
        since = datetime(2026, 10, 20)
        assert len(recent_income(RECORDS, limit=None, since=since)) == 3

    def test_withdrawal_week_starts_on_monday(self):
        items = [
            withdrawal(datetime(2026, 10, 18, 9, 0)),   # Sunday, previous week
            withdrawal(datetime(2026, 10, 19, 9, 0)),   # Monday
            withdrawal(datetime(2026, 10, 21, 9, 0)),
        ]
        assert len(filter_withdrawals(items, "week", NOW)) == 2
        assert len(filter_withdrawals(items, "day", NOW)) == 1
