# parkdesk/schemas/tariffs.py
"""
Tariff table stored under the `parkingRates` key.
Missing fields fall back to the defaults below, so services always
receive a fully populated table.
"""

from pydantic import BaseModel, Field

from parkdesk.schemas.records import VehicleKind


class CarTariff(BaseModel):
    min15: int = Field(1600, ge=0)
    min30: int = Field(2400, ge=0)
    min45: int = Field(2800, ge=0)
    hour: int = Field(3200, ge=0)
    monthly: int = Field(100000, ge=0)
    daily: int = Field(25000, ge=0)
    event: int = Field(8000, ge=0)


class MotorcycleTariff(BaseModel):
    min30: int = Field(1000, ge=0)
    hour: int = Field(1300, ge=0)
    monthly: int = Field(60000, ge=0)
    daily: int = Field(15000, ge=0)
    event: int = Field(3000, ge=0)


class TariffTable(BaseModel):
    car: CarTariff = CarTariff()
    motorcycle: MotorcycleTariff = MotorcycleTariff()

    def for_kind(self, kind: VehicleKind):
        return self.car if kind == VehicleKind.CAR else self.motorcycle
