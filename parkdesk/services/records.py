# parkdesk/services/records.py
"""
Typed access to the record collections kept in the key-value store.

Every loader recovers from malformed stored data by logging a warning and
returning the empty/default value; nothing here raises to the caller.
Writes go through commit(), which persists all given collections together.
"""

from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from parkdesk.errors import MalformedStoredData
from parkdesk.schemas.records import (
    ActiveSession,
    CashStart,
    CashWithdrawal,
    DailyPassRecord,
    IncomeRecord,
    VehicleRegistryEntry,
)
from parkdesk.schemas.tariffs import TariffTable
from parkdesk.services import store as keys
from parkdesk.services.store import KeyValueStore
from parkdesk.utils.dates import date_key
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class ParkingRecords:
    def __init__(self, store: KeyValueStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def now(self) -> datetime:
        return self.clock()

    def today_key(self) -> str:
        return date_key(self.clock())

    # ── Raw access ───────────────────────────────────────────────────────────
    def _get(self, key: str, default=None):
        try:
            value = self.store.get(key)
        except MalformedStoredData as e:
            logger.warning(f"[STORE] {e.detail}, using default")
            return default
        return default if value is None else value

    def _partition(self, key: str, model: Type[M]) -> Tuple[List[M], List[Any]]:
        """Split a stored list into validated items and the raw items that failed validation."""
        raw = self._get(key, [])
        if not isinstance(raw, list):
            logger.warning(f"[STORE] '{key}' is not a list, using empty collection")
            return [], []
        items, invalid = [], []
        for item in raw:
            try:
                items.append(model.model_validate(item))
            except ValidationError:
                invalid.append(item)
        return items, invalid

    def _load_list(self, key: str, model: Type[M]) -> List[M]:
        items, invalid = self._partition(key, model)
        if invalid:
            logger.warning(f"[STORE] Skipping {len(invalid)} invalid item(s) in '{key}' (kept in store)")
        return items

    # ── Collections ──────────────────────────────────────────────────────────
    def load_registry(self) -> List[VehicleRegistryEntry]:
        return self._load_list(keys.VEHICLE_REGISTRY, VehicleRegistryEntry)

    def load_active(self) -> List[ActiveSession]:
        return self._load_list(keys.ACTIVE_VEHICLES, ActiveSession)

    def load_daily_passes(self) -> List[DailyPassRecord]:
        """Today's passes only. Passes from earlier days are purged from the store."""
        passes = self._load_list(keys.DAILY_PAYMENTS, DailyPassRecord)
        today = self.today_key()
        current = [p for p in passes if p.date_key == today]
        if len(current) != len(passes):
            logger.info(f"[DAILY] Purged {len(passes) - len(current)} stale daily pass(es)")
            self.commit(daily_passes=current)
        return current

    def load_income(self) -> List[IncomeRecord]:
        return self._load_list(keys.INCOME_RECORDS, IncomeRecord)

    def load_withdrawals(self) -> List[CashWithdrawal]:
        return self._load_list(keys.CASH_WITHDRAWALS, CashWithdrawal)

    def load_cash_start(self) -> Optional[CashStart]:
        raw = self._get(keys.CASH_START)
        if raw is None:
            return None
        try:
            return CashStart.model_validate(raw)
        except ValidationError:
            logger.warning("[STORE] 'cashStart' is invalid, ignoring it")
            return None

    # ── Configuration ────────────────────────────────────────────────────────
    def load_tariffs(self) -> TariffTable:
        raw = self._get(keys.PARKING_RATES, {})
        try:
            return TariffTable.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"[STORE] 'parkingRates' invalid ({e.error_count()} error(s)), using defaults")
            return TariffTable()

    def save_tariffs(self, tariffs: TariffTable) -> None:
        self.store.set(keys.PARKING_RATES, tariffs.model_dump(mode="json"))

    def event_active_today(self) -> bool:
        return self._get(keys.EVENT_ACTIVE_DATE_KEY, "") == self.today_key()

    def set_event_active(self, active: bool) -> None:
        self.store.set(keys.EVENT_ACTIVE_DATE_KEY, self.today_key() if active else "")

    # ── Writes ───────────────────────────────────────────────────────────────
    def commit(
        self,
        registry: Optional[List[VehicleRegistryEntry]] = None,
        active: Optional[List[ActiveSession]] = None,
        daily_passes: Optional[List[DailyPassRecord]] = None,
        income: Optional[List[IncomeRecord]] = None,
        withdrawals: Optional[List[CashWithdrawal]] = None,
        cash_start: Optional[CashStart] = None,
    ) -> None:
        """
        Persist every collection passed in as a single store write.
        Stored items that fail validation are written back untouched after
        the typed ones, so a rewrite never drops records it cannot read.
        """
        values = {}
        for key, model, items in (
            (keys.VEHICLE_REGISTRY, VehicleRegistryEntry, registry),
            (keys.ACTIVE_VEHICLES, ActiveSession, active),
            (keys.DAILY_PAYMENTS, DailyPassRecord, daily_passes),
            (keys.INCOME_RECORDS, IncomeRecord, income),
            (keys.CASH_WITHDRAWALS, CashWithdrawal, withdrawals),
        ):
            if items is not None:
                _, invalid = self._partition(key, model)
                values[key] = [item.model_dump(mode="json") for item in items] + invalid
        if cash_start is not None:
            values[keys.CASH_START] = cash_start.model_dump(mode="json")
        if values:
            self.store.set_many(values)
