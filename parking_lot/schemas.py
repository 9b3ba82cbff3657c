from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from parking_lot.constants import VehicleClass


class VehicleEntryCreate(BaseModel):
    plate_number: str
    vehicle_type: int = Field(1, description="1 for CAR, 2 for BIKE")


class VehicleExitCreate(BaseModel):
    plate_number: str


class VehicleEntryResponse(BaseModel):
    message: str
    plate_number: str
    spot_number: int
    vehicle_type: VehicleClass
    entry_timestamp: datetime
    returning_customer: bool


class VehicleExitResponse(BaseModel):
    message: str
    plate_number: str
    spot_number: int
    entry_timestamp: datetime
    exit_timestamp: datetime
    fee: float
    discounted: bool


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    spot_number: int
    license_plate: str
    price: float
    entry_timestamp: datetime
    exit_timestamp: Optional[datetime] = None


class SpotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number: int
    vehicle_class: VehicleClass
    available: bool


class OccupancyResponse(BaseModel):
    spots: List[SpotResponse]
    spots_in_use: int = 0
    spots_avail: int = 0
    usage_rate: float = 0.0


class GateSignal(BaseModel):
    gate: str
    action: str = "open"
    plate_number: str
    spot_number: int
    timestamp: datetime
    fee: Optional[float] = None
