# parkdesk/services/live_totals.py
"""
Derived dashboard figures (vehicles inside, today's income, cash on hand).

Values are cached until a store-change notification arrives for one of the
keys they are derived from, or until the calendar day changes. No polling.

Each rebuild reads through records opened by `open_records` (a context
manager), so request threads never share a database session. A rebuild that
overlaps a store change is returned but not cached.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, ContextManager, List, Optional

from parkdesk.services import store as keys
from parkdesk.services.cash_ledger import CashLedger
from parkdesk.services.records import ParkingRecords
from parkdesk.services.store import StoreNotifier
from parkdesk.utils.dates import date_key
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

WATCHED_KEYS = (
    keys.ACTIVE_VEHICLES,
    keys.INCOME_RECORDS,
    keys.CASH_WITHDRAWALS,
    keys.CASH_START,
)


@dataclass
class Totals:
    date_key: str
    vehicles_inside: int
    income_today: int
    cash_on_hand: int


class LiveTotals:
    def __init__(
        self,
        open_records: Callable[[], ContextManager[ParkingRecords]],
        change_notifier: StoreNotifier,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.open_records = open_records
        self.clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._cached: Optional[Totals] = None
        self._unsubscribers: List[Callable[[], None]] = [
            change_notifier.subscribe(key, self._on_change) for key in WATCHED_KEYS
        ]

    def _on_change(self, key, value) -> None:
        with self._lock:
            if self._cached is not None:
                logger.debug(f"[TOTALS] '{key}' changed, cache dropped")
            self._generation += 1
            self._cached = None

    @staticmethod
    def _build(records: ParkingRecords) -> Totals:
        summary = CashLedger(records).summary()
        return Totals(
            date_key=summary.date_key,
            vehicles_inside=len(records.load_active()),
            income_today=summary.income,
            cash_on_hand=summary.cash_on_hand,
        )

    def get(self) -> Totals:
        with self._lock:
            cached, generation = self._cached, self._generation
        if cached is not None and cached.date_key == date_key(self.clock()):
            return cached

        with self.open_records() as records:
            totals = self._build(records)

        with self._lock:
            # Only keep the result if no watched key changed while building it
            if self._generation == generation:
                self._cached = totals
        return totals

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
