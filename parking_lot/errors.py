class ParkingLotError(Exception):
    """Base class for errors raised by the parking lot."""


class InputError(ParkingLotError, ValueError):
    """Operator or fare input that cannot be used (blank plate, bad selection, bad interval)."""


class NotFoundError(ParkingLotError, LookupError):
    """No free spot, or no ticket for a plate."""


class PersistenceError(ParkingLotError):
    """The database could not complete a statement."""
