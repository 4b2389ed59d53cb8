# parkdesk/schemas/vehicle.py
from pydantic import BaseModel
from datetime import datetime
from typing import Dict, Optional

from parkdesk.schemas.records import VehicleKind


class VehicleUpdate(BaseModel):
    plate: str
    vehicle_kind: VehicleKind = VehicleKind.CAR
    brand: str = ""


class MonthlySubscriberOut(BaseModel):
    plate: str
    vehicle_kind: VehicleKind
    brand: str
    monthly_expiry: Optional[datetime]
    days_left: int
    status: str


class MonthlyOverviewOut(BaseModel):
    total: int
    counts: Dict[str, int]
    subscribers: list[MonthlySubscriberOut]
