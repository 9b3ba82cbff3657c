import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parking_lot.constants import VehicleClass
from parking_lot.models import ParkingSpot, Ticket

logger = logging.getLogger(__name__)


# Spots

async def find_next_available_spot(db: AsyncSession, vehicle_class: VehicleClass) -> Optional[int]:
    """Lowest-numbered free spot for the class. The spot is not reserved."""
    try:
        result = await db.execute(
            select(func.min(ParkingSpot.number)).where(
                ParkingSpot.vehicle_class == vehicle_class,
                ParkingSpot.available == True
            )
        )
        return result.scalar()
    except SQLAlchemyError:
        logger.exception(f"Error fetching next available {vehicle_class.value} spot")
        return None


async def set_spot_availability(db: AsyncSession, spot_number: int, available: bool) -> bool:
    # Only flips a spot currently in the opposite state, so two check-ins
    # racing for the same spot cannot both occupy it.
    try:
        result = await db.execute(
            update(ParkingSpot)
            .where(
                ParkingSpot.number == spot_number,
                ParkingSpot.available == (not available)
            )
            .values(available=available)
        )
        return result.rowcount == 1
    except SQLAlchemyError:
        logger.exception(f"Error updating availability of spot {spot_number}")
        return False


async def list_spots(db: AsyncSession) -> List[ParkingSpot]:
    try:
        result = await db.execute(select(ParkingSpot).order_by(ParkingSpot.number))
        return list(result.scalars().all())
    except SQLAlchemyError:
        logger.exception("Error listing parking spots")
        return []


# Tickets

async def create_ticket(db: AsyncSession, ticket: Ticket) -> bool:
    try:
        db.add(ticket)
        await db.flush()
        return True
    except SQLAlchemyError:
        logger.exception(f"Error saving ticket for {ticket.license_plate}")
        return False


async def find_open_or_latest_ticket_by_plate(db: AsyncSession, plate_number: str) -> Optional[Ticket]:
    try:
        result = await db.execute(
            select(Ticket)
            .where(Ticket.license_plate == plate_number)
            .order_by(
                Ticket.exit_timestamp.is_(None).desc(),
                Ticket.entry_timestamp.desc(),
                Ticket.id.desc()
            )
            .limit(1)
        )
        return result.scalars().first()
    except SQLAlchemyError:
        logger.exception(f"Error fetching ticket for {plate_number}")
        return None


async def update_ticket(db: AsyncSession, ticket: Ticket) -> bool:
    try:
        result = await db.execute(
            update(Ticket)
            .where(Ticket.id == ticket.id)
            .values(price=ticket.price, exit_timestamp=ticket.exit_timestamp)
        )
        return result.rowcount == 1
    except SQLAlchemyError:
        logger.exception(f"Error updating ticket {ticket.id}")
        return False


async def count_completed_sessions(db: AsyncSession, plate_number: str) -> int:
    """Closed tickets only; an open ticket never counts."""
    try:
        result = await db.execute(
            select(func.count(Ticket.id)).where(
                Ticket.license_plate == plate_number,
                Ticket.exit_timestamp.is_not(None)
            )
        )
        return result.scalar() or 0
    except SQLAlchemyError:
        logger.exception(f"Error counting tickets for {plate_number}")
        return 0


async def commit(db: AsyncSession) -> bool:
    try:
        await db.commit()
        return True
    except SQLAlchemyError:
        logger.exception("Error committing parking transaction")
        await db.rollback()
        return False
