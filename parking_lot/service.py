import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from parking_lot import crud
from parking_lot.errors import InputError
from parking_lot.fare import FarePolicy
from parking_lot.input_reader import InputReader
from parking_lot.models import Ticket, utcnow
from parking_lot.outcomes import (
    Allocated,
    CheckInOutcome,
    CheckOutOutcome,
    Closed,
    Failed,
    InvalidInput,
    InvalidSelection,
    LotFull,
    NoSession,
)

logger = logging.getLogger(__name__)


class ParkingService:
    """
    Checks vehicles in and out of the lot.

    Every operation runs in its own database session and commits once at the
    end, so occupying a spot and opening its ticket (or closing a ticket and
    freeing its spot) are persisted together or not at all.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        fare_policy: FarePolicy,
        input_reader: InputReader,
        clock: Callable = utcnow,
    ):
        self.session_factory = session_factory
        self.fare_policy = fare_policy
        self.input_reader = input_reader
        self.clock = clock

    async def process_incoming_vehicle(self) -> CheckInOutcome:
        try:
            vehicle_class = self.input_reader.read_vehicle_class()
        except InputError as e:
            logger.error(f"Error parsing user input for type of vehicle: {e}")
            return InvalidSelection(str(e))

        async with self.session_factory() as db:
            spot_number = await crud.find_next_available_spot(db, vehicle_class)
            if spot_number is None:
                logger.warning(f"No {vehicle_class.value} spot available")
                return LotFull(vehicle_class)

            try:
                plate_number = self.input_reader.read_vehicle_plate()
            except InputError as e:
                logger.error(f"Error reading vehicle plate: {e}")
                return InvalidInput(str(e))

            returning_customer = await crud.count_completed_sessions(db, plate_number) > 0
            if returning_customer:
                logger.info(f"Returning customer {plate_number}")

            if not await crud.set_spot_availability(db, spot_number, False):
                await db.rollback()
                return Failed(f"spot {spot_number} could not be occupied")

            entry_time = self.clock()
            ticket = Ticket(
                spot_number=spot_number,
                license_plate=plate_number,
                price=0.0,
                entry_timestamp=entry_time,
                exit_timestamp=None,
            )
            if not await crud.create_ticket(db, ticket):
                await db.rollback()
                return Failed(f"ticket for {plate_number} could not be saved")

            if not await crud.commit(db):
                return Failed(f"entry of {plate_number} could not be recorded")

        logger.info(f"Vehicle {plate_number} parked in spot {spot_number} at {entry_time}")
        return Allocated(
            ticket_id=ticket.id,
            spot_number=spot_number,
            vehicle_class=vehicle_class,
            plate_number=plate_number,
            entry_time=entry_time,
            returning_customer=returning_customer,
        )

    async def process_exiting_vehicle(self) -> CheckOutOutcome:
        try:
            plate_number = self.input_reader.read_vehicle_plate()
        except InputError as e:
            logger.error(f"Error reading vehicle plate: {e}")
            return InvalidInput(str(e))

        async with self.session_factory() as db:
            ticket = await crud.find_open_or_latest_ticket_by_plate(db, plate_number)
            if ticket is None or not ticket.is_open:
                logger.warning(f"No open ticket for {plate_number}")
                return NoSession(plate_number)

            exit_time = self.clock()
            # Counted before the ticket is closed, so only prior visits count.
            discount = await crud.count_completed_sessions(db, plate_number) > 1

            try:
                price = self.fare_policy.compute_fare(
                    ticket.entry_timestamp, exit_time, ticket.spot.vehicle_class, discount
                )
            except InputError as e:
                logger.error(f"Unable to compute fare for {plate_number}: {e}")
                return InvalidInput(str(e))

            spot_number = ticket.spot_number
            ticket.price = price
            ticket.exit_timestamp = exit_time
            if not await crud.update_ticket(db, ticket):
                await db.rollback()
                return Failed(f"ticket for {plate_number} could not be updated")

            if not await crud.set_spot_availability(db, spot_number, True):
                await db.rollback()
                return Failed(f"spot {spot_number} could not be freed")

            if not await crud.commit(db):
                return Failed(f"exit of {plate_number} could not be recorded")

        logger.info(f"Vehicle {plate_number} left spot {spot_number}, fare {price}")
        return Closed(
            ticket_id=ticket.id,
            spot_number=spot_number,
            plate_number=plate_number,
            price=price,
            entry_time=ticket.entry_timestamp,
            exit_time=exit_time,
            discounted=discount,
        )

    async def find_ticket(self, plate_number: str) -> Optional[Ticket]:
        async with self.session_factory() as db:
            return await crud.find_open_or_latest_ticket_by_plate(db, plate_number)
