# parkdesk/services/cash_ledger.py
"""
Cash drawer for the current day.

cash on hand = opening float + today's income - today's withdrawals

The opening float is per day: a stored CashStart from another date reads as
0 for today and must be set again by the operator.
"""

import math
from dataclasses import dataclass
from typing import List, Optional
from uuid import uuid4

from parkdesk.errors import InsufficientFunds, InvalidAmount
from parkdesk.schemas.records import CashStart, CashWithdrawal
from parkdesk.services.income_service import today_income_total
from parkdesk.services.records import ParkingRecords
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)


def compute_cash_on_hand(start: CashStart, income_total: int, withdrawals_total: int) -> int:
    return start.amount + income_total - withdrawals_total


def _validated_amount(amount) -> int:
    """Accept whole numbers only (ints, or floats/strings holding one)."""
    if isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")
    if not math.isfinite(value) or value != int(value):
        raise InvalidAmount(f"Amount must be a whole number, got {amount!r}")
    return int(value)


@dataclass
class CashSummary:
    date_key: str
    start: int
    income: int
    withdrawals: int
    cash_on_hand: int


class CashLedger:
    def __init__(self, records: ParkingRecords):
        self.records = records

    def get_cash_start(self) -> CashStart:
        today = self.records.today_key()
        start = self.records.load_cash_start()
        if start is None or start.date_key != today:
            return CashStart(date_key=today, amount=0)
        return start

    def set_cash_start(self, amount) -> CashStart:
        value = _validated_amount(amount)
        if value < 0:
            raise InvalidAmount("Opening cash cannot be negative")
        start = CashStart(date_key=self.records.today_key(), amount=value)
        self.records.commit(cash_start=start)
        logger.info(f"[CASH] Opening float set to {value} for {start.date_key}")
        return start

    def withdrawals_today(self) -> List[CashWithdrawal]:
        today = self.records.today_key()
        return [w for w in self.records.load_withdrawals() if w.date_key == today]

    def income_today(self) -> int:
        return today_income_total(self.records.load_income(), self.records.now())

    def cash_on_hand(self) -> int:
        withdrawn = sum(w.amount for w in self.withdrawals_today())
        return compute_cash_on_hand(self.get_cash_start(), self.income_today(), withdrawn)

    def summary(self) -> CashSummary:
        start = self.get_cash_start()
        income = self.income_today()
        withdrawn = sum(w.amount for w in self.withdrawals_today())
        return CashSummary(
            date_key=start.date_key,
            start=start.amount,
            income=income,
            withdrawals=withdrawn,
            cash_on_hand=compute_cash_on_hand(start, income, withdrawn),
        )

    def add_withdrawal(self, amount, note: Optional[str] = None) -> CashWithdrawal:
        value = _validated_amount(amount)
        if value <= 0:
            raise InvalidAmount("Withdrawal amount must be greater than zero")
        available = self.cash_on_hand()
        if available - value < 0:
            logger.warning(f"[CASH] Rejected withdrawal of {value}: only {available} on hand")
            raise InsufficientFunds(f"Cannot withdraw {value}: only {available} in the drawer")

        now = self.records.now()
        withdrawal = CashWithdrawal(
            id=f"withdraw_{uuid4().hex[:12]}",
            timestamp=now,
            date_key=self.records.today_key(),
            amount=value,
            note=(note or "").strip() or None,
        )
        self.records.commit(withdrawals=self.records.load_withdrawals() + [withdrawal])
        logger.info(f"[CASH] Withdrawal {value} ({withdrawal.note or 'no note'})")
        return withdrawal
