# parkdesk/schemas/records.py
"""
Persisted record shapes.
Each collection is stored as a JSON array (or object) under one store key;
these models validate it on the way in and serialize it on the way out.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class VehicleKind(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"


class PaymentKind(str, Enum):
    MONTHLY = "monthly"
    DAILY = "daily"
    TIME_BASED = "time_based"
    EVENT = "event"


class BillingMode(str, Enum):
    """Billing option picked on the register form. Exactly one applies."""

    PLAIN = "plain"
    MONTHLY = "monthly"
    DAILY = "daily"
    EVENT = "event"


class VehicleRegistryEntry(BaseModel):
    plate: str
    vehicle_kind: VehicleKind = VehicleKind.CAR
    brand: str = ""
    monthly_expiry: Optional[datetime] = None


class ActiveSession(BaseModel):
    plate: str
    vehicle_kind: VehicleKind
    brand: str = ""
    is_monthly: bool = False
    monthly_expiry: Optional[datetime] = None
    is_event: bool = False
    entry_timestamp: datetime


class DailyPassRecord(BaseModel):
    plate: str
    vehicle_kind: VehicleKind
    brand: str = ""
    date_key: str       # YYYY-MM-DD, local time
    created_at: datetime


class IncomeRecord(BaseModel):
    id: str
    timestamp: datetime
    plate: str
    vehicle_kind: VehicleKind
    brand: str = ""
    payment_kind: PaymentKind
    amount: int
    entry_timestamp: datetime
    exit_timestamp: datetime
    duration_minutes: int = 0


class CashWithdrawal(BaseModel):
    id: str
    timestamp: datetime
    date_key: str
    amount: int
    note: Optional[str] = None


class CashStart(BaseModel):
    date_key: str
    amount: int = 0


class Receipt(BaseModel):
    """Finalized transaction handed to the receipt printer."""

    plate: str
    vehicle_kind: VehicleKind
    brand: str = ""
    entry_timestamp: datetime
    exit_timestamp: Optional[datetime] = None
    amount: int = 0
    payment_label: Optional[str] = None
    is_exit: bool = False
    issued_at: datetime
