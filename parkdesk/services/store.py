# parkdesk/services/store.py
"""
Key-value store behind every record collection.

get(key)  -> decoded JSON or None
set(key)  -> persist and notify subscribers of that key
subscribe -> register a change handler (returns an unsubscribe callable)

Two backends: SqlKeyValueStore (one row per key in `store_entries`) and
InMemoryKeyValueStore (tests, scripts). Both share one StoreNotifier so a
write through any store instance reaches every subscriber in the process.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from parkdesk.models.store_entry import StoreEntry
from parkdesk.utils.json_parser import decode_json, encode_json
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

# ── Store keys ───────────────────────────────────────────────────────────────
VEHICLE_REGISTRY = "vehicleRegistry"
ACTIVE_VEHICLES = "activeVehicles"
DAILY_PAYMENTS = "dailyPayments"
INCOME_RECORDS = "incomeRecords"
CASH_WITHDRAWALS = "cashWithdrawals"
CASH_START = "cashStart"
PARKING_RATES = "parkingRates"
EVENT_ACTIVE_DATE_KEY = "eventActiveDateKey"

ChangeHandler = Callable[[str, Any], None]


class StoreNotifier:
    """In-process change channel. Handlers get (key, new_value)."""

    def __init__(self):
        self._subscribers: Dict[str, List[ChangeHandler]] = {}

    def subscribe(self, key: str, handler: ChangeHandler) -> Callable[[], None]:
        self._subscribers.setdefault(key, []).append(handler)
        return lambda: self.unsubscribe(key, handler)

    def unsubscribe(self, key: str, handler: ChangeHandler) -> None:
        handlers = self._subscribers.get(key, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, key: str, value: Any) -> None:
        for handler in list(self._subscribers.get(key, [])):
            try:
                handler(key, value)
            except Exception as e:
                # A broken listener must not undo a committed write
                logger.error(f"[STORE] Change handler for '{key}' failed: {e}", exc_info=True)


notifier = StoreNotifier()


class KeyValueStore(ABC):
    def __init__(self, change_notifier: Optional[StoreNotifier] = None):
        self.notifier = change_notifier or notifier

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write_many(self, items: Dict[str, str]) -> None:
        """Persist all items as one unit."""

    def get(self, key: str) -> Any:
        """Return the decoded value, or None if the key was never written."""
        raw = self._read(key)
        if raw is None:
            return None
        return decode_json(raw, key)

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, Any]) -> None:
        """Write several keys together, then notify once per key."""
        self._write_many({key: encode_json(value) for key, value in values.items()})
        for key, value in values.items():
            self.notifier.publish(key, value)

    def subscribe(self, key: str, handler: ChangeHandler) -> Callable[[], None]:
        return self.notifier.subscribe(key, handler)


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, db: Session, change_notifier: Optional[StoreNotifier] = None):
        super().__init__(change_notifier)
        self.db = db

    def _read(self, key: str) -> Optional[str]:
        # Column select always hits the database, never the identity map
        return self.db.execute(
            select(StoreEntry.value).where(StoreEntry.key == key)
        ).scalar_one_or_none()

    def _write_many(self, items: Dict[str, str]) -> None:
        now = datetime.now()
        try:
            for key, text in items.items():
                row = self.db.get(StoreEntry, key)
                if row is None:
                    self.db.add(StoreEntry(key=key, value=text, updated_at=now))
                else:
                    row.value = text
                    row.updated_at = now
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug(f"[STORE] Wrote {sorted(items)}")


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps serialized JSON text per key, so readers never share objects."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None,
                 change_notifier: Optional[StoreNotifier] = None):
        super().__init__(change_notifier or StoreNotifier())
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = encode_json(value)

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write_many(self, items: Dict[str, str]) -> None:
        self._data.update(items)

    def raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put_raw(self, key: str, text: str) -> None:
        """Store text as-is, bypassing encoding and notifications."""
        self._data[key] = text
