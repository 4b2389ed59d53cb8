# parkdesk/routers/register.py
"""
Register desk endpoints: plate lookup, entry, exit and receipt reprint.
Every write answers with the finalized receipt; printing runs afterwards
as a background task.
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from typing import Optional

from parkdesk.deps import get_session_manager
from parkdesk.errors import NothingToReprint
from parkdesk.schemas.records import ActiveSession, BillingMode, VehicleKind
from parkdesk.schemas.register import EntryRequest, ExitRequest, PlateLookupOut, TransactionOut
from parkdesk.services.receipt_service import send_receipt
from parkdesk.services.session_service import SessionManager, Transaction

router = APIRouter()


def _respond(transaction: Transaction, background: BackgroundTasks) -> TransactionOut:
    background.add_task(send_receipt, transaction.receipt)
    return TransactionOut(receipt=transaction.receipt, income=transaction.income,
                          reprint=transaction.reprint)


@router.get("/register/plates/{plate}", response_model=PlateLookupOut, summary="Classify a plate")
def lookup_plate(plate: str, vehicle_kind: Optional[VehicleKind] = None,
                 mode: BillingMode = BillingMode.PLAIN,
                 manager: SessionManager = Depends(get_session_manager)):
    """What the desk should do with this plate, plus the live price for the form."""
    c, price = manager.preview(plate, vehicle_kind, mode)
    return PlateLookupOut(
        status=c.status.value,
        plate=c.plate,
        vehicle_kind=c.vehicle_kind,
        brand=c.brand,
        is_monthly=c.is_monthly,
        daily_locked=c.daily_locked,
        blocked=c.blocked,
        monthly_expiry=c.monthly_expiry,
        monthly_expired=c.monthly_expired,
        entry_timestamp=c.session.entry_timestamp if c.session else None,
        notice=c.notice,
        price=price,
    )


@router.post("/register/entries", response_model=TransactionOut, summary="Register entry or payment")
def register_entry(body: EntryRequest, background: BackgroundTasks,
                   manager: SessionManager = Depends(get_session_manager)):
    transaction = manager.register_entry(body.plate, body.vehicle_kind, body.brand, body.mode)
    return _respond(transaction, background)


@router.post("/register/exits", response_model=TransactionOut, summary="Register exit")
def register_exit(body: ExitRequest, background: BackgroundTasks,
                  manager: SessionManager = Depends(get_session_manager)):
    return _respond(manager.register_exit(body.plate), background)


@router.post("/register/submit", response_model=TransactionOut, summary="Register form submit")
def submit(body: EntryRequest, background: BackgroundTasks,
           manager: SessionManager = Depends(get_session_manager)):
    """Exit when the plate is inside, entry otherwise; the reprint plate reprints."""
    transaction = manager.submit(body.plate, body.vehicle_kind, body.brand, body.mode)
    return _respond(transaction, background)


@router.get("/register/reprint", response_model=TransactionOut, summary="Reprint last receipt")
def reprint(background: BackgroundTasks, manager: SessionManager = Depends(get_session_manager)):
    transaction = manager.last_receipt()
    if transaction is None:
        raise NothingToReprint()
    return _respond(transaction, background)


@router.get("/register/active", response_model=list[ActiveSession], summary="Vehicles inside")
def list_active(manager: SessionManager = Depends(get_session_manager)):
    return sorted(manager.records.load_active(), key=lambda s: s.entry_timestamp)
