# parkdesk/services/plate_resolver.py
"""
Plate classification for the register desk.

Given a typed plate and the persisted collections, decide what the desk
should do with it. First match wins:

  EMPTY           nothing typed
  INSIDE          has an active session (exit billing); may also be daily_locked
  DAILY_LOCKED    paid the daily rate today, not inside
  MONTHLY_LOCKED  monthly pass still valid
  KNOWN_REENTRY   seen before, autofill kind/brand
  NEW_VEHICLE     never seen

The reprint sentinel ("0101") is handled by the caller before this runs.
A monthly-locked vehicle never has an active session (monthly payments do
not open one), so INSIDE is checked before the monthly lock without
re-validating that.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from parkdesk.schemas.records import (
    ActiveSession,
    DailyPassRecord,
    VehicleKind,
    VehicleRegistryEntry,
)


class PlateStatus(str, Enum):
    EMPTY = "empty"
    INSIDE = "inside"
    DAILY_LOCKED = "daily_locked"
    MONTHLY_LOCKED = "monthly_locked"
    KNOWN_REENTRY = "known_reentry"
    NEW_VEHICLE = "new_vehicle"


@dataclass
class Classification:
    status: PlateStatus
    plate: str
    vehicle_kind: VehicleKind = VehicleKind.CAR
    brand: str = ""
    is_monthly: bool = False              # form monthly flag (inside monthly sessions only)
    daily_locked: bool = False
    monthly_expiry: Optional[datetime] = None
    monthly_expired: bool = False         # informational, never blocks
    session: Optional[ActiveSession] = None
    registry_entry: Optional[VehicleRegistryEntry] = None
    notice: Optional[str] = None

    @property
    def blocked(self) -> bool:
        return self.status in (PlateStatus.DAILY_LOCKED, PlateStatus.MONTHLY_LOCKED)


def normalize_plate(plate_raw: Optional[str]) -> str:
    return (plate_raw or "").strip().upper()


def _find(items: Iterable, plate: str):
    return next((item for item in items if item.plate == plate), None)


def resolve_plate(
    plate_raw: Optional[str],
    registry: Iterable[VehicleRegistryEntry],
    active_sessions: Iterable[ActiveSession],
    daily_passes: Iterable[DailyPassRecord],
    today_key: str,
    now: datetime,
) -> Classification:
    plate = normalize_plate(plate_raw)
    if not plate:
        return Classification(status=PlateStatus.EMPTY, plate="")

    entry = _find(registry, plate)
    session = _find(active_sessions, plate)
    daily_pass = next(
        (p for p in daily_passes if p.plate == plate and p.date_key == today_key), None
    )

    if session is not None:
        # Registry holds the freshest kind/brand (admin edits land there first)
        source = entry or session
        return Classification(
            status=PlateStatus.INSIDE,
            plate=plate,
            vehicle_kind=source.vehicle_kind,
            brand=source.brand,
            is_monthly=session.is_monthly,
            daily_locked=daily_pass is not None,
            monthly_expiry=session.monthly_expiry,
            session=session,
            registry_entry=entry,
            notice="Daily pass active today" if daily_pass is not None else None,
        )

    if daily_pass is not None:
        source = entry or daily_pass
        return Classification(
            status=PlateStatus.DAILY_LOCKED,
            plate=plate,
            vehicle_kind=source.vehicle_kind,
            brand=source.brand,
            daily_locked=True,
            registry_entry=entry,
            notice=f"Registration blocked: daily pass active for {today_key}",
        )

    if entry is None:
        return Classification(status=PlateStatus.NEW_VEHICLE, plate=plate)

    expiry = entry.monthly_expiry
    if expiry is not None and expiry > now:
        return Classification(
            status=PlateStatus.MONTHLY_LOCKED,
            plate=plate,
            vehicle_kind=entry.vehicle_kind,
            brand=entry.brand,
            monthly_expiry=expiry,
            registry_entry=entry,
            notice=f"Registration blocked: monthly pass active until {expiry:%Y-%m-%d}",
        )

    expired = expiry is not None
    return Classification(
        status=PlateStatus.KNOWN_REENTRY,
        plate=plate,
        vehicle_kind=entry.vehicle_kind,
        brand=entry.brand,
        monthly_expiry=expiry,
        monthly_expired=expired,
        registry_entry=entry,
        notice=f"Monthly pass expired on {expiry:%Y-%m-%d}; registration allowed" if expired else None,
    )
