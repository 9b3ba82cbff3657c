import enum


class VehicleClass(str, enum.Enum):
    CAR = "CAR"
    BIKE = "BIKE"
    OTHER = "OTHER"


# Menu selection -> vehicle class, as offered at the entry gate
VEHICLE_SELECTIONS = {
    1: VehicleClass.CAR,
    2: VehicleClass.BIKE,
}

CAR_RATE_PER_HOUR = 1.5
BIKE_RATE_PER_HOUR = 1.0

FREE_GRACE_HOURS = 0.5
RECURRING_DISCOUNT_FACTOR = 0.95
