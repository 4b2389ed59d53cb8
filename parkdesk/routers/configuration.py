# parkdesk/routers/configuration.py
"""Tariff table and the per-day event flag."""

from fastapi import APIRouter, Depends

from parkdesk.deps import get_records
from parkdesk.schemas.configuration import EventFlag, EventFlagOut
from parkdesk.schemas.tariffs import TariffTable
from parkdesk.services.records import ParkingRecords
from parkdesk.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/configuration/rates", response_model=TariffTable, summary="Current tariffs")
def get_rates(records: ParkingRecords = Depends(get_records)):
    return records.load_tariffs()


@router.put("/configuration/rates", response_model=TariffTable, summary="Update tariffs")
def update_rates(body: TariffTable, records: ParkingRecords = Depends(get_records)):
    """Takes effect immediately, including for vehicles already inside."""
    records.save_tariffs(body)
    logger.info("[CONFIG] Tariffs updated")
    return body


@router.get("/configuration/event", response_model=EventFlagOut, summary="Event billing today?")
def get_event_flag(records: ParkingRecords = Depends(get_records)):
    return EventFlagOut(active=records.event_active_today(), date_key=records.today_key())


@router.put("/configuration/event", response_model=EventFlagOut, summary="Toggle event billing for today")
def set_event_flag(body: EventFlag, records: ParkingRecords = Depends(get_records)):
    records.set_event_active(body.active)
    logger.info(f"[CONFIG] Event billing {'enabled' if body.active else 'disabled'} for {records.today_key()}")
    return EventFlagOut(active=body.active, date_key=records.today_key())
