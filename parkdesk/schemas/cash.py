# parkdesk/schemas/cash.py
from pydantic import BaseModel
from typing import Dict, Optional

from parkdesk.schemas.records import CashWithdrawal, IncomeRecord


class CashStartRequest(BaseModel):
    amount: int


class WithdrawalRequest(BaseModel):
    amount: int
    note: Optional[str] = None


class CashSummaryOut(BaseModel):
    date_key: str
    start: int
    income: int
    withdrawals: int
    cash_on_hand: int

    class Config:
        from_attributes = True


class IncomeStatsOut(BaseModel):
    period: str
    total: int
    count: int
    by_payment_kind: Dict[str, int]
    by_vehicle_kind: Dict[str, int]


class MovementsOut(BaseModel):
    period: str
    income: list[IncomeRecord]
    withdrawals: list[CashWithdrawal]
