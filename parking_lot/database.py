import logging

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from parking_lot.config import DATABASE_URL, PARKING_BIKE_SPOTS, PARKING_CAR_SPOTS, SQL_ECHO
from parking_lot.constants import VehicleClass
from parking_lot.errors import PersistenceError

logger = logging.getLogger(__name__)

engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def seed_spots(db: AsyncSession, car_spots: int = PARKING_CAR_SPOTS, bike_spots: int = PARKING_BIKE_SPOTS):
    """Number CAR spots from 1, then BIKE spots, unless the lot is already seeded."""
    from parking_lot.models import ParkingSpot

    try:
        existing = await db.scalar(select(func.count()).select_from(ParkingSpot))
        if existing:
            logger.info(f"Parking lot already holds {existing} spots, skipping seed")
            return existing

        layout = [VehicleClass.CAR] * car_spots + [VehicleClass.BIKE] * bike_spots
        db.add_all(
            ParkingSpot(number=number, vehicle_class=vehicle_class, available=True)
            for number, vehicle_class in enumerate(layout, start=1)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceError(f"Unable to seed parking spots: {e}") from e

    logger.info(f"Seeded {car_spots} car spots and {bike_spots} bike spots")
    return len(layout)


async def init_db(session_factory: async_sessionmaker = AsyncSessionLocal):
    import parking_lot.models  # noqa: F401  registers the tables on Base

    bind = session_factory.kw["bind"]
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as db:
        await seed_spots(db)


def get_session_factory() -> async_sessionmaker:
    return AsyncSessionLocal


async def get_db(session_factory: async_sessionmaker = Depends(get_session_factory)):
    async with session_factory() as session:
        yield session
