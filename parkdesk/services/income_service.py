# parkdesk/services/income_service.py
"""
Income statistics over the append-only income ledger, and period filters
for the cash movement history.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from parkdesk.schemas.records import CashWithdrawal, IncomeRecord, PaymentKind, VehicleKind
from parkdesk.utils.dates import start_of_day, start_of_week

PERIODS = ("day", "week", "month", "year")


@dataclass
class IncomeStats:
    total: int = 0
    count: int = 0
    by_payment_kind: Dict[str, int] = field(
        default_factory=lambda: {k.value: 0 for k in PaymentKind})
    by_vehicle_kind: Dict[str, int] = field(
        default_factory=lambda: {k.value: 0 for k in VehicleKind})


def income_stats(records: Iterable[IncomeRecord], start: datetime, end: datetime,
                 inclusive_end: bool = False) -> IncomeStats:
    """Aggregate records with start <= timestamp < end (<= end when inclusive)."""
    stats = IncomeStats()
    for record in records:
        ts = record.timestamp
        if ts < start or ts > end or (ts == end and not inclusive_end):
            continue
        stats.total += record.amount
        stats.count += 1
        stats.by_payment_kind[record.payment_kind.value] += record.amount
        stats.by_vehicle_kind[record.vehicle_kind.value] += record.amount
    return stats


def period_bounds(period: str, now: datetime, first_weekday: int = 6):
    """[start, end) of the named period containing `now`. Income weeks start on Sunday."""
    today = start_of_day(now)
    if period == "day":
        return today, today + timedelta(days=1)
    if period == "week":
        start = start_of_week(now, first_weekday)
        return start, start + timedelta(days=7)
    if period == "month":
        start = today.replace(day=1)
        end = start.replace(year=start.year + 1, month=1) if start.month == 12 \
            else start.replace(month=start.month + 1)
        return start, end
    if period == "year":
        start = today.replace(month=1, day=1)
        return start, start.replace(year=start.year + 1)
    raise ValueError(f"Unknown period: {period}")


def income_for_period(records: Iterable[IncomeRecord], period: str, now: datetime) -> IncomeStats:
    start, end = period_bounds(period, now)
    return income_stats(records, start, end)


def income_for_range(records: Iterable[IncomeRecord], start: datetime, end: datetime) -> IncomeStats:
    return income_stats(records, start, end, inclusive_end=True)


def today_income_total(records: Iterable[IncomeRecord], now: datetime) -> int:
    return income_for_period(records, "day", now).total


def recent_income(records: Iterable[IncomeRecord], limit: Optional[int] = 20,
                  since: Optional[datetime] = None) -> List[IncomeRecord]:
    selected = [r for r in records if since is None or r.timestamp >= since]
    selected.sort(key=lambda r: r.timestamp, reverse=True)
    return selected if limit is None else selected[:limit]


def filter_withdrawals(withdrawals: Iterable[CashWithdrawal], period: str,
                       now: datetime) -> List[CashWithdrawal]:
    """Withdrawals from the start of the period until now. Movement weeks start on Monday."""
    start, _ = period_bounds(period if period in PERIODS else "day", now, first_weekday=0)
    return [w for w in withdrawals if w.timestamp >= start]
