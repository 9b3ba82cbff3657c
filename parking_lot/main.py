import asyncio
import logging

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from parking_lot import crud
from parking_lot.config import API_ROOT_PATH, LOG_LEVEL, MQTT_ENTRY_TOPIC, MQTT_EXIT_TOPIC
from parking_lot.database import get_db, get_session_factory, init_db
from parking_lot.errors import NotFoundError
from parking_lot.fare import FarePolicy
from parking_lot.gate import entry_signal, exit_signal, publish_gate_signal
from parking_lot.input_reader import RequestInputReader
from parking_lot.outcomes import (
    Allocated,
    Closed,
    InvalidInput,
    InvalidSelection,
    LotFull,
    NoSession,
)
from parking_lot.schemas import (
    OccupancyResponse,
    SpotResponse,
    TicketResponse,
    VehicleEntryCreate,
    VehicleEntryResponse,
    VehicleExitCreate,
    VehicleExitResponse,
)
from parking_lot.service import ParkingService

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Parking Lot Service",
    version="1.0.0",
    root_path=API_ROOT_PATH
)


def get_fare_policy() -> FarePolicy:
    return FarePolicy()


def outcome_status(outcome) -> int:
    if isinstance(outcome, (InvalidSelection, InvalidInput)):
        return HTTP_400_BAD_REQUEST
    if isinstance(outcome, LotFull):
        return HTTP_409_CONFLICT
    if isinstance(outcome, NoSession):
        return HTTP_404_NOT_FOUND
    return HTTP_500_INTERNAL_SERVER_ERROR


async def get_ticket_or_404(service: ParkingService, plate_number: str):
    ticket = await service.find_ticket(plate_number)
    if ticket is None:
        raise NotFoundError(f"No ticket found for {plate_number}")
    return ticket


@app.on_event("startup")
async def on_startup():
    await init_db()


@app.post("/api/v1/sessions/entry/", response_model=VehicleEntryResponse)
async def vehicle_entry(
    entry: VehicleEntryCreate,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    fare_policy: FarePolicy = Depends(get_fare_policy),
):
    service = ParkingService(
        session_factory,
        fare_policy,
        RequestInputReader(plate_number=entry.plate_number, vehicle_type=entry.vehicle_type)
    )
    outcome = await service.process_incoming_vehicle()
    if not isinstance(outcome, Allocated):
        raise HTTPException(status_code=outcome_status(outcome), detail=outcome.message)

    asyncio.create_task(publish_gate_signal(MQTT_ENTRY_TOPIC, entry_signal(outcome)))

    message = "Vehicle entry recorded"
    if outcome.returning_customer:
        message += ". Welcome back! As a regular user, you will receive a 5% discount"

    return VehicleEntryResponse(
        message=message,
        plate_number=outcome.plate_number,
        spot_number=outcome.spot_number,
        vehicle_type=outcome.vehicle_class,
        entry_timestamp=outcome.entry_time,
        returning_customer=outcome.returning_customer
    )


@app.put("/api/v1/sessions/exit/", response_model=VehicleExitResponse)
async def vehicle_exit(
    entry: VehicleExitCreate,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    fare_policy: FarePolicy = Depends(get_fare_policy),
):
    service = ParkingService(session_factory, fare_policy, RequestInputReader(plate_number=entry.plate_number))
    outcome = await service.process_exiting_vehicle()
    if not isinstance(outcome, Closed):
        raise HTTPException(status_code=outcome_status(outcome), detail=outcome.message)

    asyncio.create_task(publish_gate_signal(MQTT_EXIT_TOPIC, exit_signal(outcome)))

    return VehicleExitResponse(
        message="Exit recorded",
        plate_number=outcome.plate_number,
        spot_number=outcome.spot_number,
        entry_timestamp=outcome.entry_time,
        exit_timestamp=outcome.exit_time,
        fee=round(outcome.price, 2),
        discounted=outcome.discounted
    )


@app.get("/api/v1/sessions/{plate_number}", response_model=TicketResponse)
async def ticket_by_plate(
    plate_number: str,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    fare_policy: FarePolicy = Depends(get_fare_policy),
):
    service = ParkingService(session_factory, fare_policy, RequestInputReader(plate_number=plate_number))
    try:
        ticket = await get_ticket_or_404(service, plate_number.strip())
    except NotFoundError as e:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=str(e))
    return TicketResponse.model_validate(ticket)


@app.get("/api/v1/spots/", response_model=OccupancyResponse)
async def spot_occupancy(db: AsyncSession = Depends(get_db)):
    spots = await crud.list_spots(db)
    in_use = sum(1 for spot in spots if not spot.available)
    return OccupancyResponse(
        spots=[SpotResponse.model_validate(spot) for spot in spots],
        spots_in_use=in_use,
        spots_avail=len(spots) - in_use,
        usage_rate=round(in_use / len(spots), 2) if spots else 0.0
    )


if __name__ == "__main__":
    uvicorn.run("parking_lot.main:app", host="0.0.0.0", port=8000, reload=True)
