# parkdesk/errors.py
"""
Domain errors raised by the register, cash and vehicle services.
Routers never catch these; main.py maps them to JSON error responses.
"""

from datetime import datetime
from typing import Optional


class ParkingError(Exception):
    """Base class for every user-facing failure."""

    code = "parking_error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidAmount(ParkingError):
    code = "invalid_amount"


class InsufficientFunds(ParkingError):
    code = "insufficient_funds"


class NotInside(ParkingError):
    code = "not_inside"
    status_code = 404

    def __init__(self, plate: str):
        super().__init__(f"Vehicle {plate} is not inside the lot")
        self.plate = plate


class AlreadyInside(ParkingError):
    code = "already_inside"
    status_code = 409

    def __init__(self, plate: str):
        super().__init__(f"Vehicle {plate} is already inside the lot")
        self.plate = plate


class NotRegistered(ParkingError):
    code = "not_registered"
    status_code = 404

    def __init__(self, plate: str):
        super().__init__(f"Plate {plate} is not in the vehicle registry")
        self.plate = plate


class PlateConflict(ParkingError):
    code = "plate_conflict"
    status_code = 409

    def __init__(self, plate: str):
        super().__init__(f"Plate {plate} already belongs to another vehicle")
        self.plate = plate


class Blocked(ParkingError):
    """Registration attempted against a live monthly or daily lock."""

    MONTHLY_ACTIVE = "monthly_active"
    DAILY_ACTIVE = "daily_active"

    code = "blocked"
    status_code = 409

    def __init__(self, reason: str, until, plate: Optional[str] = None):
        if reason == self.MONTHLY_ACTIVE:
            label = until.strftime("%Y-%m-%d") if isinstance(until, datetime) else str(until)
            detail = f"Registration blocked: monthly pass active until {label}"
        else:
            detail = f"Registration blocked: daily pass active for {until}"
        super().__init__(detail)
        self.reason = reason
        self.until = until
        self.plate = plate


class MalformedStoredData(ParkingError):
    """Persisted JSON could not be decoded; callers recover with a default."""

    code = "malformed_stored_data"
    status_code = 500

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored value for '{key}' is malformed: {reason}")
        self.key = key


class InvalidPlate(ParkingError):
    code = "invalid_plate"

    def __init__(self, plate: str = ""):
        super().__init__(f"Plate '{plate}' is not valid" if plate else "Plate is required")
        self.plate = plate


class NothingToReprint(ParkingError):
    code = "nothing_to_reprint"
    status_code = 404

    def __init__(self):
        super().__init__("No previous receipt to reprint")
