# parkdesk/routers/cash.py
"""Cash drawer and income endpoints."""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from parkdesk.deps import get_cash_ledger, get_live_totals
from parkdesk.schemas.cash import (
    CashStartRequest,
    CashSummaryOut,
    IncomeStatsOut,
    MovementsOut,
    WithdrawalRequest,
)
from parkdesk.schemas.records import CashStart, CashWithdrawal
from parkdesk.services.cash_ledger import CashLedger
from parkdesk.services.income_service import (
    PERIODS,
    filter_withdrawals,
    income_for_period,
    income_for_range,
    period_bounds,
    recent_income,
)
from parkdesk.services.live_totals import LiveTotals

router = APIRouter()


def _check_period(period: str):
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail=f"period must be one of {', '.join(PERIODS)}")


@router.get("/cash/summary", response_model=CashSummaryOut, summary="Cash on hand today")
def cash_summary(ledger: CashLedger = Depends(get_cash_ledger)):
    return CashSummaryOut.model_validate(ledger.summary())


@router.get("/cash/totals", summary="Dashboard totals (cached until the store changes)")
def cash_totals(totals: LiveTotals = Depends(get_live_totals)):
    return totals.get()


@router.put("/cash/start", response_model=CashStart, summary="Set today's opening float")
def set_cash_start(body: CashStartRequest, ledger: CashLedger = Depends(get_cash_ledger)):
    return ledger.set_cash_start(body.amount)


@router.post("/cash/withdrawals", response_model=CashWithdrawal, summary="Withdraw cash")
def add_withdrawal(body: WithdrawalRequest, ledger: CashLedger = Depends(get_cash_ledger)):
    return ledger.add_withdrawal(body.amount, body.note)


@router.get("/cash/movements", response_model=MovementsOut, summary="Income and withdrawals")
def movements(period: str = "day", limit: int = Query(50, ge=1), ledger: CashLedger = Depends(get_cash_ledger)):
    """Latest income records and the withdrawals of the selected period."""
    _check_period(period)
    records = ledger.records
    now = records.now()
    start, _ = period_bounds(period, now)
    withdrawals = filter_withdrawals(records.load_withdrawals(), period, now)
    return MovementsOut(
        period=period,
        income=recent_income(records.load_income(), limit, since=start),
        withdrawals=sorted(withdrawals, key=lambda w: w.timestamp, reverse=True),
    )


@router.get("/cash/income", response_model=IncomeStatsOut, summary="Income statistics")
def income(period: str = "day", start: Optional[datetime] = None, end: Optional[datetime] = None,
           ledger: CashLedger = Depends(get_cash_ledger)):
    """Named period (day/week/month/year) or a custom inclusive range via start+end."""
    records = ledger.records.load_income()
    if start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(status_code=400, detail="start and end must be given together")
        stats, label = income_for_range(records, start, end), "range"
    else:
        _check_period(period)
        stats, label = income_for_period(records, period, ledger.records.now()), period
    return IncomeStatsOut(period=label, total=stats.total, count=stats.count,
                          by_payment_kind=stats.by_payment_kind,
                          by_vehicle_kind=stats.by_vehicle_kind)
