# parkdesk/services/monthly_service.py
"""Monthly subscribers view: registry entries carrying a monthly expiry."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List

from parkdesk.schemas.records import VehicleRegistryEntry


@dataclass
class MonthlySubscriber:
    entry: VehicleRegistryEntry
    days_left: int
    status: str      # expired | expiring | warning | active


def expiry_status(days_left: int) -> str:
    if days_left < 0:
        return "expired"
    if days_left <= 3:
        return "expiring"
    if days_left <= 7:
        return "warning"
    return "active"


def days_until(expiry: datetime, now: datetime) -> int:
    return math.ceil((expiry - now).total_seconds() / 86400)


def monthly_subscribers(registry: Iterable[VehicleRegistryEntry], now: datetime) -> List[MonthlySubscriber]:
    """Subscribers sorted by expiry, soonest first."""
    subscribers = []
    for entry in registry:
        if entry.monthly_expiry is None:
            continue
        days_left = days_until(entry.monthly_expiry, now)
        subscribers.append(MonthlySubscriber(entry=entry, days_left=days_left,
                                             status=expiry_status(days_left)))
    subscribers.sort(key=lambda s: s.entry.monthly_expiry)
    return subscribers


def status_counts(subscribers: Iterable[MonthlySubscriber]) -> Dict[str, int]:
    counts = {"expired": 0, "expiring": 0, "warning": 0, "active": 0}
    for s in subscribers:
        counts[s.status] += 1
    return counts
