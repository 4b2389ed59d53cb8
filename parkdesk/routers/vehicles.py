# parkdesk/routers/vehicles.py
"""Vehicle registry: listing, atomic plate edit, deletion, monthly subscribers."""

from fastapi import APIRouter, Depends
from typing import Optional

from parkdesk.deps import get_session_manager
from parkdesk.schemas.records import VehicleRegistryEntry
from parkdesk.schemas.vehicle import MonthlyOverviewOut, MonthlySubscriberOut, VehicleUpdate
from parkdesk.services.monthly_service import monthly_subscribers, status_counts
from parkdesk.services.session_service import SessionManager

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleRegistryEntry], summary="List registered vehicles")
def list_vehicles(search: Optional[str] = None, manager: SessionManager = Depends(get_session_manager)):
    registry = manager.records.load_registry()
    if search:
        term = search.strip().upper()
        registry = [v for v in registry if term in v.plate]
    return sorted(registry, key=lambda v: v.plate)


@router.get("/vehicles/monthly", response_model=MonthlyOverviewOut, summary="Monthly subscribers")
def list_monthly(manager: SessionManager = Depends(get_session_manager)):
    subscribers = monthly_subscribers(manager.records.load_registry(), manager.records.now())
    return MonthlyOverviewOut(
        total=len(subscribers),
        counts=status_counts(subscribers),
        subscribers=[
            MonthlySubscriberOut(
                plate=s.entry.plate,
                vehicle_kind=s.entry.vehicle_kind,
                brand=s.entry.brand,
                monthly_expiry=s.entry.monthly_expiry,
                days_left=s.days_left,
                status=s.status,
            )
            for s in subscribers
        ],
    )


@router.put("/vehicles/{plate}", response_model=VehicleRegistryEntry, summary="Edit a vehicle")
def edit_vehicle(plate: str, body: VehicleUpdate, manager: SessionManager = Depends(get_session_manager)):
    """Renames the plate everywhere it appears (registry, inside, passes, income)."""
    return manager.edit_plate(plate, body.plate, body.vehicle_kind, body.brand)


@router.delete("/vehicles/{plate}", summary="Remove a vehicle")
def remove_vehicle(plate: str, manager: SessionManager = Depends(get_session_manager)):
    manager.delete_vehicle(plate)
    return {"status": "removed", "plate": plate.strip().upper()}
