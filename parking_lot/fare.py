from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Union

from parking_lot.constants import (
    BIKE_RATE_PER_HOUR,
    CAR_RATE_PER_HOUR,
    FREE_GRACE_HOURS,
    RECURRING_DISCOUNT_FACTOR,
    VehicleClass,
)
from parking_lot.errors import InputError


def _default_rates() -> Mapping[VehicleClass, float]:
    return {
        VehicleClass.CAR: CAR_RATE_PER_HOUR,
        VehicleClass.BIKE: BIKE_RATE_PER_HOUR,
    }


@dataclass(frozen=True)
class FarePolicy:
    """
    Prices a parking interval.

    Stays up to ``grace_hours`` are free, whatever the vehicle class. Longer
    stays pay the hourly rate of the vehicle class for the full fractional
    duration, reduced by ``discount_factor`` for recurring users. The result
    is not rounded.
    """

    rates: Mapping[VehicleClass, float] = field(default_factory=_default_rates)
    grace_hours: float = FREE_GRACE_HOURS
    discount_factor: float = RECURRING_DISCOUNT_FACTOR

    def __post_init__(self):
        # read-only copy, so a policy cannot be repriced after construction
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_for(self, vehicle_class: Union[VehicleClass, str, None]) -> float:
        if vehicle_class is None:
            raise InputError("Vehicle class is required")
        try:
            vehicle_class = VehicleClass(vehicle_class)
        except ValueError:
            raise InputError(f"Unknown vehicle class: {vehicle_class}") from None
        if vehicle_class not in self.rates:
            raise InputError(f"Unsupported vehicle class: {vehicle_class.value}")
        return self.rates[vehicle_class]

    def compute_fare(
        self,
        entry_time: Optional[datetime],
        exit_time: Optional[datetime],
        vehicle_class: Union[VehicleClass, str, None],
        apply_discount: bool = False,
    ) -> float:
        if entry_time is None:
            raise InputError("Entry time is required")
        if exit_time is None:
            raise InputError("Exit time is required")
        if exit_time < entry_time:
            raise InputError(f"Exit time {exit_time} precedes entry time {entry_time}")

        duration = (exit_time - entry_time).total_seconds() / 3600.0
        if duration <= self.grace_hours:
            return 0.0

        price = duration * self.rate_for(vehicle_class)
        if apply_discount:
            price = price * self.discount_factor
        return price
