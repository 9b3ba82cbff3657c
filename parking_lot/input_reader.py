from parking_lot.constants import VEHICLE_SELECTIONS, VehicleClass
from parking_lot.errors import InputError


class InputReader:
    """
    Source of operator input for the parking service.

    Subclasses supply the raw values; trimming and validation happen here so
    that every source rejects the same bad input.
    """

    def read_raw_selection(self) -> str:
        raise NotImplementedError

    def read_raw_plate(self) -> str:
        raise NotImplementedError

    def read_menu_selection(self) -> int:
        raw = self.read_raw_selection()
        try:
            return int(str(raw).strip())
        except (TypeError, ValueError):
            raise InputError(f"Invalid selection: {raw!r}") from None

    def read_vehicle_plate(self) -> str:
        raw = self.read_raw_plate()
        plate = (raw or "").strip()
        if not plate:
            raise InputError("Vehicle plate must not be blank")
        return plate

    def read_vehicle_class(self) -> VehicleClass:
        selection = self.read_menu_selection()
        try:
            return VEHICLE_SELECTIONS[selection]
        except KeyError:
            raise InputError(f"Unrecognised vehicle type selection: {selection}") from None


class ConsoleInputReader(InputReader):
    def __init__(self, input_func=input, output_func=print):
        self.input_func = input_func
        self.output_func = output_func

    def read_raw_selection(self) -> str:
        return self.input_func()

    def read_raw_plate(self) -> str:
        self.output_func("Please type the vehicle registration number and press enter key")
        return self.input_func()

    def read_vehicle_class(self) -> VehicleClass:
        self.output_func("Please select vehicle type from menu")
        for selection, vehicle_class in VEHICLE_SELECTIONS.items():
            self.output_func(f"{selection} {vehicle_class.value}")
        return super().read_vehicle_class()


class RequestInputReader(InputReader):
    """Replays the values of one HTTP request."""

    def __init__(self, plate_number=None, vehicle_type=None):
        self.plate_number = plate_number
        self.vehicle_type = vehicle_type

    def read_raw_selection(self):
        return self.vehicle_type

    def read_raw_plate(self):
        return self.plate_number
