from dataclasses import dataclass
from datetime import datetime
from typing import Union

from parking_lot.constants import VehicleClass


@dataclass(frozen=True)
class Allocated:
    ticket_id: int
    spot_number: int
    vehicle_class: VehicleClass
    plate_number: str
    entry_time: datetime
    returning_customer: bool = False

    ok = True

    @property
    def message(self):
        return f"Please park your vehicle in spot number:{self.spot_number}"


@dataclass(frozen=True)
class LotFull:
    vehicle_class: VehicleClass

    ok = False

    @property
    def message(self):
        return f"No {self.vehicle_class.value} spot available. Parking slots might be full"


@dataclass(frozen=True)
class InvalidSelection:
    reason: str

    ok = False

    @property
    def message(self):
        return f"Incorrect input provided: {self.reason}"


@dataclass(frozen=True)
class InvalidInput:
    reason: str

    ok = False

    @property
    def message(self):
        return f"Invalid input provided: {self.reason}"


@dataclass(frozen=True)
class Closed:
    ticket_id: int
    spot_number: int
    plate_number: str
    price: float
    entry_time: datetime
    exit_time: datetime
    discounted: bool = False

    ok = True

    @property
    def message(self):
        return f"Please pay the parking fare:{self.price:.2f}"


@dataclass(frozen=True)
class NoSession:
    plate_number: str

    ok = False

    @property
    def message(self):
        return f"No open parking session found for {self.plate_number}"


@dataclass(frozen=True)
class Failed:
    reason: str

    ok = False

    @property
    def message(self):
        return f"Unable to process vehicle: {self.reason}"


CheckInOutcome = Union[Allocated, LotFull, InvalidSelection, InvalidInput, Failed]
CheckOutOutcome = Union[Closed, NoSession, InvalidInput, Failed]
