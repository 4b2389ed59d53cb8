# parkdesk/deps.py
"""FastAPI dependencies wiring the store into the services."""

from contextlib import contextmanager

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from parkdesk.database import SessionLocal, get_db
from parkdesk.services.cash_ledger import CashLedger
from parkdesk.services.live_totals import LiveTotals
from parkdesk.services.records import ParkingRecords
from parkdesk.services.session_service import SessionManager
from parkdesk.services.store import KeyValueStore, SqlKeyValueStore


def get_store(db: Session = Depends(get_db)) -> KeyValueStore:
    return SqlKeyValueStore(db)


def get_records(store: KeyValueStore = Depends(get_store)) -> ParkingRecords:
    return ParkingRecords(store)


def get_session_manager(records: ParkingRecords = Depends(get_records)) -> SessionManager:
    return SessionManager(records)


def get_cash_ledger(records: ParkingRecords = Depends(get_records)) -> CashLedger:
    return CashLedger(records)


@contextmanager
def open_sql_records():
    """Records over a fresh DB session, closed on exit. Used outside request scope."""
    db = SessionLocal()
    try:
        yield ParkingRecords(SqlKeyValueStore(db))
    finally:
        db.close()


def get_live_totals(request: Request) -> LiveTotals:
    """App-wide instance created at startup (see main.py)."""
    return request.app.state.live_totals
