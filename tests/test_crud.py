import unittest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from parking_lot import crud
from parking_lot.constants import VehicleClass
from parking_lot.models import Ticket, spot_key
from tests.support import T0, DatabaseTestCase


def open_ticket(plate_number="ABCDEF", spot_number=1, entry_time=T0):
    return Ticket(spot_number=spot_number, license_plate=plate_number, price=0.0, entry_timestamp=entry_time)


def closed_ticket(plate_number="ABCDEF", spot_number=1, entry_time=T0, price=1.5):
    return Ticket(
        spot_number=spot_number,
        license_plate=plate_number,
        price=price,
        entry_timestamp=entry_time,
        exit_timestamp=entry_time + timedelta(hours=1),
    )


class TestSpotRepository(DatabaseTestCase):

    async def test_next_available_is_lowest_number_of_class(self):
        async with self.session_factory() as db:
            self.assertEqual(await crud.find_next_available_spot(db, VehicleClass.CAR), 1)
            self.assertEqual(await crud.find_next_available_spot(db, VehicleClass.BIKE), 4)

    async def test_next_available_does_not_reserve(self):
        async with self.session_factory() as db:
            await crud.find_next_available_spot(db, VehicleClass.CAR)
            self.assertEqual(await crud.find_next_available_spot(db, VehicleClass.CAR), 1)
        self.assertTrue(await self.spot_available(1))

    async def test_next_available_skips_occupied(self):
        async with self.session_factory() as db:
            self.assertTrue(await crud.set_spot_availability(db, 1, False))
            self.assertEqual(await crud.find_next_available_spot(db, VehicleClass.CAR), 2)

    async def test_none_when_class_is_full(self):
        async with self.session_factory() as db:
            for number in (4, 5):
                self.assertTrue(await crud.set_spot_availability(db, number, False))
            self.assertIsNone(await crud.find_next_available_spot(db, VehicleClass.BIKE))

    async def test_none_for_class_without_spots(self):
        async with self.session_factory() as db:
            self.assertIsNone(await crud.find_next_available_spot(db, VehicleClass.OTHER))

    async def test_occupy_and_free(self):
        async with self.session_factory() as db:
            self.assertTrue(await crud.set_spot_availability(db, 2, False))
            await db.commit()
        self.assertFalse(await self.spot_available(2))

        async with self.session_factory() as db:
            self.assertTrue(await crud.set_spot_availability(db, 2, True))
            await db.commit()
        self.assertTrue(await self.spot_available(2))

    async def test_occupying_an_occupied_spot_fails(self):
        async with self.session_factory() as db:
            self.assertTrue(await crud.set_spot_availability(db, 3, False))
            self.assertFalse(await crud.set_spot_availability(db, 3, False))

    async def test_unknown_spot_fails(self):
        async with self.session_factory() as db:
            self.assertFalse(await crud.set_spot_availability(db, 99, False))

    async def test_list_spots(self):
        async with self.session_factory() as db:
            spots = await crud.list_spots(db)
        self.assertEqual([spot_key(spot) for spot in spots], [1, 2, 3, 4, 5])
        self.assertEqual(
            [spot.vehicle_class for spot in spots],
            [VehicleClass.CAR] * 3 + [VehicleClass.BIKE] * 2,
        )

    async def test_spot_identity_is_its_number(self):
        async with self.session_factory() as db:
            first = await crud.list_spots(db)
        async with self.session_factory() as db:
            await crud.set_spot_availability(db, 1, False)
            await db.commit()
            second = await crud.list_spots(db)
        self.assertEqual({spot_key(spot) for spot in first}, {spot_key(spot) for spot in second})


class TestTicketRepository(DatabaseTestCase):

    async def test_create_then_find_by_plate(self):
        async with self.session_factory() as db:
            self.assertTrue(await crud.create_ticket(db, open_ticket(spot_number=4)))
            await db.commit()

        async with self.session_factory() as db:
            ticket = await crud.find_open_or_latest_ticket_by_plate(db, "ABCDEF")

        self.assertEqual(ticket.license_plate, "ABCDEF")
        self.assertEqual(ticket.spot_number, 4)
        self.assertEqual(ticket.spot.vehicle_class, VehicleClass.BIKE)
        self.assertEqual(ticket.price, 0)
        self.assertEqual(ticket.entry_timestamp, T0)
        self.assertIsNone(ticket.exit_timestamp)
        self.assertTrue(ticket.is_open)

    async def test_find_unknown_plate(self):
        async with self.session_factory() as db:
            self.assertIsNone(await crud.find_open_or_latest_ticket_by_plate(db, "NOPE"))

    async def test_open_ticket_wins_over_later_closed_one(self):
        async with self.session_factory() as db:
            await crud.create_ticket(db, open_ticket(entry_time=T0))
            await crud.create_ticket(db, closed_ticket(entry_time=T0 + timedelta(days=1)))
            await db.commit()
            ticket = await crud.find_open_or_latest_ticket_by_plate(db, "ABCDEF")
        self.assertIsNone(ticket.exit_timestamp)

    async def test_latest_closed_ticket_without_open_one(self):
        async with self.session_factory() as db:
            await crud.create_ticket(db, closed_ticket(entry_time=T0, price=1.0))
            await crud.create_ticket(db, closed_ticket(entry_time=T0 + timedelta(days=1), price=2.0))
            await db.commit()
            ticket = await crud.find_open_or_latest_ticket_by_plate(db, "ABCDEF")
        self.assertEqual(ticket.price, 2.0)

    async def test_update_ticket(self):
        async with self.session_factory() as db:
            ticket = open_ticket()
            await crud.create_ticket(db, ticket)
            ticket.price = 3.25
            ticket.exit_timestamp = T0 + timedelta(hours=2)
            self.assertTrue(await crud.update_ticket(db, ticket))
            await db.commit()

        async with self.session_factory() as db:
            stored = await crud.find_open_or_latest_ticket_by_plate(db, "ABCDEF")
        self.assertEqual(stored.price, 3.25)
        self.assertEqual(stored.exit_timestamp, T0 + timedelta(hours=2))

    async def test_update_unknown_ticket_fails(self):
        ticket = closed_ticket()
        ticket.id = 42
        async with self.session_factory() as db:
            self.assertFalse(await crud.update_ticket(db, ticket))

    async def test_count_completed_sessions_ignores_open_tickets(self):
        async with self.session_factory() as db:
            await crud.create_ticket(db, closed_ticket(entry_time=T0))
            await crud.create_ticket(db, closed_ticket(entry_time=T0 + timedelta(days=1)))
            await crud.create_ticket(db, open_ticket(entry_time=T0 + timedelta(days=2)))
            await crud.create_ticket(db, closed_ticket(plate_number="OTHER"))
            await db.commit()
            self.assertEqual(await crud.count_completed_sessions(db, "ABCDEF"), 2)
            self.assertEqual(await crud.count_completed_sessions(db, "OTHER"), 1)
            self.assertEqual(await crud.count_completed_sessions(db, "NEW"), 0)


class TestPersistenceFailures(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        self.db = MagicMock()
        self.db.execute = AsyncMock(side_effect=self.error)
        self.db.flush = AsyncMock(side_effect=self.error)
        self.db.commit = AsyncMock(side_effect=self.error)
        self.db.rollback = AsyncMock()

    async def test_find_next_available_reports_none(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertIsNone(await crud.find_next_available_spot(self.db, VehicleClass.CAR))

    async def test_set_availability_reports_failure(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertFalse(await crud.set_spot_availability(self.db, 1, False))

    async def test_list_spots_reports_empty(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertEqual(await crud.list_spots(self.db), [])

    async def test_create_ticket_reports_failure(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertFalse(await crud.create_ticket(self.db, open_ticket()))

    async def test_find_ticket_reports_none(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertIsNone(await crud.find_open_or_latest_ticket_by_plate(self.db, "ABCDEF"))

    async def test_update_ticket_reports_failure(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertFalse(await crud.update_ticket(self.db, closed_ticket()))

    async def test_count_reports_zero(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertEqual(await crud.count_completed_sessions(self.db, "ABCDEF"), 0)

    async def test_commit_rolls_back(self):
        with self.assertLogs("parking_lot.crud", level="ERROR"):
            self.assertFalse(await crud.commit(self.db))
        self.db.rollback.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
