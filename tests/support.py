import unittest
from datetime import datetime, timedelta

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import parking_lot.models  # noqa: F401
from parking_lot.database import Base, seed_spots
from parking_lot.models import ParkingSpot, Ticket

T0 = datetime(2024, 5, 6, 9, 0, 0)


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh in-memory lot per test: CAR spots 1-3, BIKE spots 4-5."""

    car_spots = 3
    bike_spots = 2

    async def asyncSetUp(self):
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        async with self.session_factory() as db:
            await seed_spots(db, self.car_spots, self.bike_spots)

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def count_tickets(self, plate_number=None):
        query = select(func.count(Ticket.id))
        if plate_number is not None:
            query = query.where(Ticket.license_plate == plate_number)
        async with self.session_factory() as db:
            return await db.scalar(query)

    async def spot_available(self, number):
        async with self.session_factory() as db:
            spot = await db.get(ParkingSpot, number)
            return spot.available

    async def set_entry_time(self, plate_number, entry_time):
        async with self.session_factory() as db:
            await db.execute(
                update(Ticket)
                .where(Ticket.license_plate == plate_number, Ticket.exit_timestamp.is_(None))
                .values(entry_timestamp=entry_time)
            )
            await db.commit()
