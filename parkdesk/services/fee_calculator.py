# parkdesk/services/fee_calculator.py
"""
Fee calculation: pure functions, no store access.

Time-based brackets
  car:        <=15 min15 | <=30 min30 | <=45 min45 | <=60 hour
  motorcycle: <=30 min30 | <=60 hour
Beyond one hour: full hours * hour + a surcharge for the leftover minutes,
using the same brackets (no surcharge when the leftover is 0).

Event: flat event fee for the first EVENT_FREE_MINUTES; minutes past that
are billed with the time-based brackets and added on top.
Monthly / daily: flat rate, elapsed time ignored.
"""

import math
from datetime import datetime
from typing import Optional

from parkdesk.config import settings
from parkdesk.schemas.records import ActiveSession, BillingMode, PaymentKind, VehicleKind
from parkdesk.schemas.tariffs import CarTariff, MotorcycleTariff, TariffTable


def elapsed_minutes(entry: datetime, exit: datetime) -> int:
    """Whole minutes between entry and exit, rounded up. Negative on clock skew."""
    return math.ceil((exit - entry).total_seconds() / 60)


def _car_bracket(minutes: int, rates: CarTariff) -> int:
    if minutes <= 15:
        return rates.min15
    if minutes <= 30:
        return rates.min30
    if minutes <= 45:
        return rates.min45
    return rates.hour


def _motorcycle_bracket(minutes: int, rates: MotorcycleTariff) -> int:
    if minutes <= 30:
        return rates.min30
    return rates.hour


def remainder_surcharge(kind: VehicleKind, remainder: int, tariffs: TariffTable) -> int:
    """Charge for the minutes left over after the last full hour."""
    if remainder <= 0:
        return 0
    if kind == VehicleKind.CAR:
        return _car_bracket(remainder, tariffs.car)
    return _motorcycle_bracket(remainder, tariffs.motorcycle)


def time_based_fee(kind: VehicleKind, minutes: int, tariffs: TariffTable) -> int:
    rates = tariffs.for_kind(kind)
    if minutes <= 60:
        # Zero or negative elapsed lands in the lowest bracket
        if kind == VehicleKind.CAR:
            return _car_bracket(minutes, tariffs.car)
        return _motorcycle_bracket(minutes, tariffs.motorcycle)
    hours, remainder = divmod(minutes, 60)
    return hours * rates.hour + remainder_surcharge(kind, remainder, tariffs)


def event_fee(kind: VehicleKind, minutes: int, tariffs: TariffTable,
              free_minutes: Optional[int] = None) -> int:
    free = settings.EVENT_FREE_MINUTES if free_minutes is None else free_minutes
    flat = tariffs.for_kind(kind).event
    if minutes <= free:
        return flat
    return flat + time_based_fee(kind, minutes - free, tariffs)


def compute_fee(kind: VehicleKind, mode: PaymentKind, minutes: int, tariffs: TariffTable) -> int:
    """Amount owed for `minutes` parked under billing `mode`."""
    if mode == PaymentKind.MONTHLY:
        return tariffs.for_kind(kind).monthly
    if mode == PaymentKind.DAILY:
        return tariffs.for_kind(kind).daily
    if mode == PaymentKind.EVENT:
        return event_fee(kind, minutes, tariffs)
    return time_based_fee(kind, minutes, tariffs)


def session_payment_kind(session: ActiveSession) -> PaymentKind:
    """Billing mode for an exit, chosen from the session flags."""
    if session.is_monthly:
        return PaymentKind.MONTHLY
    if session.is_event:
        return PaymentKind.EVENT
    return PaymentKind.TIME_BASED


def preview_price(
    tariffs: TariffTable,
    now: datetime,
    kind: VehicleKind,
    mode: BillingMode = BillingMode.PLAIN,
    session: Optional[ActiveSession] = None,
    event_active_today: bool = False,
) -> int:
    """
    Price shown on the register form while it is being filled.
    A vehicle inside is billed up to `now`; otherwise the flat rate of the
    selected mode, or 0 for a plain entry (nothing is due until exit).
    """
    if session is not None:
        payment_kind = session_payment_kind(session)
        minutes = elapsed_minutes(session.entry_timestamp, now)
        return compute_fee(session.vehicle_kind, payment_kind, minutes, tariffs)
    if mode == BillingMode.MONTHLY:
        return tariffs.for_kind(kind).monthly
    if mode == BillingMode.DAILY:
        return tariffs.for_kind(kind).daily
    if mode == BillingMode.EVENT and event_active_today:
        return tariffs.for_kind(kind).event
    return 0
