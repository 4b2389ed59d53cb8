# parkdesk/schemas/register.py
from pydantic import BaseModel, model_validator
from datetime import datetime
from typing import Optional

from parkdesk.schemas.records import BillingMode, IncomeRecord, Receipt, VehicleKind


class EntryRequest(BaseModel):
    plate: str
    vehicle_kind: VehicleKind = VehicleKind.CAR
    brand: str = ""
    monthly: bool = False
    daily: bool = False
    event: bool = False

    @model_validator(mode="after")
    def one_billing_option(self):
        if sum((self.monthly, self.daily, self.event)) > 1:
            raise ValueError("Pick at most one of monthly, daily or event")
        return self

    @property
    def mode(self) -> BillingMode:
        if self.monthly:
            return BillingMode.MONTHLY
        if self.daily:
            return BillingMode.DAILY
        if self.event:
            return BillingMode.EVENT
        return BillingMode.PLAIN


class ExitRequest(BaseModel):
    plate: str


class PlateLookupOut(BaseModel):
    status: str
    plate: str
    vehicle_kind: VehicleKind
    brand: str
    is_monthly: bool
    daily_locked: bool
    blocked: bool
    monthly_expiry: Optional[datetime] = None
    monthly_expired: bool = False
    entry_timestamp: Optional[datetime] = None
    notice: Optional[str] = None
    price: int = 0


class TransactionOut(BaseModel):
    receipt: Receipt
    income: Optional[IncomeRecord] = None
    reprint: bool = False
