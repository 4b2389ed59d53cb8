# parkdesk/services/session_service.py
"""
Vehicle session lifecycle: the register desk's write path.

  OUTSIDE ──entry──> INSIDE ──exit──> OUTSIDE (income realized at exit)
  OUTSIDE ──monthly pay──> MONTHLY_LOCKED until expiry (no session)
  OUTSIDE ──daily pay────> DAILY_LOCKED until the date changes (no session)

Every operation re-reads the store, re-checks locks against that fresh
state, mutates its collections in memory and writes them with a single
commit() call. Nothing yields in between, so no caller can observe a
half-applied transaction.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from parkdesk.config import settings
from parkdesk.errors import (
    AlreadyInside,
    Blocked,
    InvalidPlate,
    NotInside,
    NotRegistered,
    NothingToReprint,
    PlateConflict,
)
from parkdesk.schemas.records import (
    ActiveSession,
    BillingMode,
    DailyPassRecord,
    IncomeRecord,
    PaymentKind,
    Receipt,
    VehicleKind,
    VehicleRegistryEntry,
)
from parkdesk.services.fee_calculator import (
    compute_fee,
    elapsed_minutes,
    preview_price,
    session_payment_kind,
)
from parkdesk.services.plate_resolver import (
    Classification,
    PlateStatus,
    normalize_plate,
    resolve_plate,
)
from parkdesk.services.records import ParkingRecords
from parkdesk.utils.dates import add_one_month
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

PAYMENT_LABELS = {
    PaymentKind.MONTHLY: "Monthly payment",
    PaymentKind.DAILY: "Daily payment",
    PaymentKind.EVENT: "Event",
    PaymentKind.TIME_BASED: None,
}


@dataclass
class Transaction:
    """Result of a register operation: the receipt plus what was written."""

    receipt: Receipt
    income: Optional[IncomeRecord] = None
    session: Optional[ActiveSession] = None
    reprint: bool = False


def _income_id() -> str:
    return f"income_{uuid4().hex[:12]}"


def _upsert(registry, plate, kind, brand, **changes):
    """Return the registry with `plate` created or updated in place."""
    for i, entry in enumerate(registry):
        if entry.plate == plate:
            registry[i] = entry.model_copy(update={"vehicle_kind": kind, "brand": brand, **changes})
            return registry
    registry.append(VehicleRegistryEntry(plate=plate, vehicle_kind=kind, brand=brand, **changes))
    return registry


def receipt_from_income(record: IncomeRecord, issued_at) -> Receipt:
    # Only time-based income reprints as an exit ticket; flat and event payments print as entries
    is_exit = record.payment_kind == PaymentKind.TIME_BASED
    return Receipt(
        plate=record.plate,
        vehicle_kind=record.vehicle_kind,
        brand=record.brand,
        entry_timestamp=record.entry_timestamp,
        exit_timestamp=record.exit_timestamp if is_exit else None,
        amount=record.amount,
        payment_label=PAYMENT_LABELS[record.payment_kind],
        is_exit=is_exit,
        issued_at=issued_at,
    )


class SessionManager:
    def __init__(self, records: ParkingRecords):
        self.records = records

    # ── Read side ────────────────────────────────────────────────────────────
    def classify(self, plate_raw: str) -> Classification:
        return resolve_plate(
            plate_raw,
            self.records.load_registry(),
            self.records.load_active(),
            self.records.load_daily_passes(),
            self.records.today_key(),
            self.records.now(),
        )

    def preview(self, plate_raw: str, kind: Optional[VehicleKind] = None,
                mode: BillingMode = BillingMode.PLAIN):
        """Classification plus the live price for the register form."""
        classification = self.classify(plate_raw)
        price = preview_price(
            self.records.load_tariffs(),
            self.records.now(),
            kind or classification.vehicle_kind,
            mode,
            session=classification.session if classification.status == PlateStatus.INSIDE else None,
            event_active_today=self.records.event_active_today(),
        )
        return classification, price

    def last_receipt(self) -> Optional[Transaction]:
        income = self.records.load_income()
        if not income:
            return None
        last = max(income, key=lambda r: r.timestamp)
        return Transaction(receipt=receipt_from_income(last, self.records.now()),
                           income=last, reprint=True)

    # ── Register desk ────────────────────────────────────────────────────────
    def submit(self, plate_raw: str, kind: VehicleKind = VehicleKind.CAR, brand: str = "",
               mode: BillingMode = BillingMode.PLAIN) -> Transaction:
        """Register form flow: reprint sentinel, exit when inside, entry otherwise."""
        plate = normalize_plate(plate_raw)
        if plate == settings.REPRINT_SENTINEL:
            reprint = self.last_receipt()
            if reprint is None:
                raise NothingToReprint()
            logger.info(f"[RECEIPT] Reprint requested for {reprint.receipt.plate}")
            return reprint
        if any(s.plate == plate for s in self.records.load_active()):
            return self.register_exit(plate)
        return self.register_entry(plate, kind, brand, mode)

    def register_entry(self, plate_raw: str, kind: VehicleKind, brand: str = "",
                       mode: BillingMode = BillingMode.PLAIN) -> Transaction:
        plate = normalize_plate(plate_raw)
        if not plate:
            raise InvalidPlate()
        brand = (brand or "").strip()

        now = self.records.now()
        today = self.records.today_key()
        registry = self.records.load_registry()
        active = self.records.load_active()
        passes = self.records.load_daily_passes()

        # Re-check against the store, not against whatever the form showed
        state = resolve_plate(plate, registry, active, passes, today, now)
        if state.status == PlateStatus.INSIDE:
            raise AlreadyInside(plate)
        if state.status == PlateStatus.DAILY_LOCKED:
            logger.warning(f"[ENTRY] Blocked {plate}: daily pass for {today}")
            raise Blocked(Blocked.DAILY_ACTIVE, today, plate)
        if state.status == PlateStatus.MONTHLY_LOCKED:
            logger.warning(f"[ENTRY] Blocked {plate}: monthly pass until {state.monthly_expiry}")
            raise Blocked(Blocked.MONTHLY_ACTIVE, state.monthly_expiry, plate)

        tariffs = self.records.load_tariffs()
        rates = tariffs.for_kind(kind)

        if mode == BillingMode.MONTHLY:
            expiry = add_one_month(now)
            registry = _upsert(registry, plate, kind, brand, monthly_expiry=expiry)
            income = self._flat_income(plate, kind, brand, PaymentKind.MONTHLY, rates.monthly, now)
            self.records.commit(registry=registry, income=self.records.load_income() + [income])
            logger.info(f"[MONTHLY] {plate} paid {rates.monthly}, valid until {expiry:%Y-%m-%d}")
            return Transaction(receipt=self._flat_receipt(income), income=income)

        if mode == BillingMode.DAILY:
            registry = _upsert(registry, plate, kind, brand)
            passes = [p for p in passes if p.plate != plate]
            passes.append(DailyPassRecord(plate=plate, vehicle_kind=kind, brand=brand,
                                          date_key=today, created_at=now))
            income = self._flat_income(plate, kind, brand, PaymentKind.DAILY, rates.daily, now)
            self.records.commit(registry=registry, daily_passes=passes,
                                income=self.records.load_income() + [income])
            logger.info(f"[DAILY] {plate} paid {rates.daily} for {today}")
            return Transaction(receipt=self._flat_receipt(income), income=income)

        is_event = mode == BillingMode.EVENT and self.records.event_active_today()
        if mode == BillingMode.EVENT and not is_event:
            logger.info(f"[ENTRY] Event billing not active today, {plate} billed by time")
        session = ActiveSession(plate=plate, vehicle_kind=kind, brand=brand,
                                is_event=is_event, entry_timestamp=now)
        registry = _upsert(registry, plate, kind, brand)
        active.append(session)
        self.records.commit(registry=registry, active=active)
        logger.info(f"[ENTRY] {plate} ({kind.value}, {brand or '-'}) event={is_event}")

        receipt = Receipt(plate=plate, vehicle_kind=kind, brand=brand, entry_timestamp=now,
                          amount=0, payment_label="Event" if is_event else None,
                          is_exit=False, issued_at=now)
        return Transaction(receipt=receipt, session=session)

    def register_exit(self, plate_raw: str) -> Transaction:
        plate = normalize_plate(plate_raw)
        active = self.records.load_active()
        session = next((s for s in active if s.plate == plate), None)
        if session is None:
            raise NotInside(plate)

        now = self.records.now()
        minutes = elapsed_minutes(session.entry_timestamp, now)
        payment_kind = session_payment_kind(session)
        amount = compute_fee(session.vehicle_kind, payment_kind, minutes, self.records.load_tariffs())

        income = IncomeRecord(
            id=_income_id(),
            timestamp=now,
            plate=plate,
            vehicle_kind=session.vehicle_kind,
            brand=session.brand,
            payment_kind=payment_kind,
            amount=amount,
            entry_timestamp=session.entry_timestamp,
            exit_timestamp=now,
            duration_minutes=max(minutes, 0),
        )
        remaining = [s for s in active if s.plate != plate]
        self.records.commit(active=remaining, income=self.records.load_income() + [income])
        logger.info(f"[EXIT] {plate} after {income.duration_minutes} min: "
                    f"{payment_kind.value} {amount}")

        receipt = Receipt(
            plate=plate,
            vehicle_kind=session.vehicle_kind,
            brand=session.brand,
            entry_timestamp=session.entry_timestamp,
            exit_timestamp=now,
            amount=amount,
            payment_label=PAYMENT_LABELS[payment_kind],
            is_exit=True,
            issued_at=now,
        )
        return Transaction(receipt=receipt, income=income, session=session)

    # ── Admin ────────────────────────────────────────────────────────────────
    def edit_plate(self, old_plate: str, new_plate: str, kind: VehicleKind,
                   brand: str = "") -> VehicleRegistryEntry:
        """
        Rename/re-describe a vehicle everywhere it is referenced: registry,
        active sessions, today's daily passes and income history, in one write.
        """
        old, new = normalize_plate(old_plate), normalize_plate(new_plate)
        if not new:
            raise InvalidPlate()
        brand = (brand or "").strip()

        registry = self.records.load_registry()
        active = self.records.load_active()
        passes = self.records.load_daily_passes()
        income = self.records.load_income()

        current = next((e for e in registry if e.plate == old), None)
        if current is None:
            raise NotRegistered(old)
        if new != old and (any(e.plate == new for e in registry)
                           or any(s.plate == new for s in active)):
            raise PlateConflict(new)

        changes = {"plate": new, "vehicle_kind": kind, "brand": brand}
        updated = current.model_copy(update=changes)
        registry = [updated if e.plate == old else e for e in registry]
        active = [s.model_copy(update=changes) if s.plate == old else s for s in active]
        passes = [p.model_copy(update=changes) if p.plate == old else p for p in passes]
        income = [r.model_copy(update=changes) if r.plate == old else r for r in income]

        self.records.commit(registry=registry, active=active, daily_passes=passes, income=income)
        logger.info(f"[REGISTRY] {old} updated -> {new} ({kind.value}, {brand or '-'})")
        return updated

    def delete_vehicle(self, plate_raw: str) -> None:
        """Remove a vehicle with its active session and today's pass. Income is kept."""
        plate = normalize_plate(plate_raw)
        registry = self.records.load_registry()
        if not any(e.plate == plate for e in registry):
            raise NotRegistered(plate)
        self.records.commit(
            registry=[e for e in registry if e.plate != plate],
            active=[s for s in self.records.load_active() if s.plate != plate],
            daily_passes=[p for p in self.records.load_daily_passes() if p.plate != plate],
        )
        logger.info(f"[REGISTRY] {plate} deleted")

    # ── Helpers ──────────────────────────────────────────────────────────────
    @staticmethod
    def _flat_income(plate, kind, brand, payment_kind, amount, now) -> IncomeRecord:
        return IncomeRecord(
            id=_income_id(),
            timestamp=now,
            plate=plate,
            vehicle_kind=kind,
            brand=brand,
            payment_kind=payment_kind,
            amount=amount,
            entry_timestamp=now,
            exit_timestamp=now,
            duration_minutes=0,
        )

    @staticmethod
    def _flat_receipt(income: IncomeRecord) -> Receipt:
        return Receipt(
            plate=income.plate,
            vehicle_kind=income.vehicle_kind,
            brand=income.brand,
            entry_timestamp=income.entry_timestamp,
            amount=income.amount,
            payment_label=PAYMENT_LABELS[income.payment_kind],
            is_exit=False,
            issued_at=income.timestamp,
        )
