import asyncio
import logging

from parking_lot.config import LOG_LEVEL
from parking_lot.database import AsyncSessionLocal, init_db
from parking_lot.errors import InputError
from parking_lot.fare import FarePolicy
from parking_lot.input_reader import ConsoleInputReader
from parking_lot.outcomes import Allocated, Closed
from parking_lot.service import ParkingService

logger = logging.getLogger(__name__)

MENU = (
    "Please select an option. Simply enter the number to choose an action",
    "1 New Vehicle Entering - Allocate Parking Space",
    "2 Vehicle Exiting - Generate Ticket Price",
    "3 Shutdown System",
)


async def handle_option(service: ParkingService, reader: ConsoleInputReader, option) -> bool:
    """Runs one menu action; False means shut down."""
    if option == 1:
        outcome = await service.process_incoming_vehicle()
        if isinstance(outcome, Allocated):
            if outcome.returning_customer:
                reader.output_func("Welcome back! As a regular user, you will receive a 5% discount")
            reader.output_func("Generated Ticket and saved in DB")
            reader.output_func(outcome.message)
            reader.output_func(
                f"Recorded in-time for vehicle number:{outcome.plate_number} is:{outcome.entry_time}"
            )
        else:
            reader.output_func(outcome.message)
    elif option == 2:
        outcome = await service.process_exiting_vehicle()
        reader.output_func(outcome.message)
        if isinstance(outcome, Closed):
            reader.output_func(
                f"Recorded out-time for vehicle number:{outcome.plate_number} is:{outcome.exit_time}"
            )
    elif option == 3:
        return False
    else:
        reader.output_func("Unsupported option. Please enter a number corresponding to the provided menu")
    return True


async def run_shell(service: ParkingService, reader: ConsoleInputReader):
    """Menu loop; returns once the operator picks shutdown or input ends."""
    logger.info("App initialized!!!")
    reader.output_func("Welcome to Parking System!")

    running = True
    while running:
        for line in MENU:
            reader.output_func(line)
        try:
            try:
                option = reader.read_menu_selection()
            except InputError:
                option = None
            running = await handle_option(service, reader, option)
        except EOFError:
            logger.info("End of input, shutting down")
            running = False

    reader.output_func("Exiting from the system!")


async def amain():
    await init_db()
    reader = ConsoleInputReader()
    await run_shell(ParkingService(AsyncSessionLocal, FarePolicy(), reader), reader)


def main():
    logging.basicConfig(level=LOG_LEVEL)
    asyncio.run(amain())


if __name__ == "__main__":
    main()
