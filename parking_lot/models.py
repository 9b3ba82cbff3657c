from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Enum, Float, ForeignKey, Integer, String, TIMESTAMP
from sqlalchemy.orm import relationship

from parking_lot.constants import VehicleClass
from parking_lot.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ParkingSpot(Base):
    __tablename__ = "parking"

    number = Column(Integer, primary_key=True, autoincrement=False)
    vehicle_class = Column(Enum(VehicleClass, native_enum=False, length=10), nullable=False)
    available = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        state = "available" if self.available else "occupied"
        return f"<ParkingSpot {self.number} {self.vehicle_class.value} {state}>"


def spot_key(spot: ParkingSpot) -> int:
    """Spots are identified by their number alone."""
    return spot.number


class Ticket(Base):
    __tablename__ = "ticket"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spot_number = Column(Integer, ForeignKey("parking.number"), nullable=False)
    license_plate = Column(String(20), nullable=False, index=True)
    price = Column(Float, nullable=False, default=0.0)
    entry_timestamp = Column(TIMESTAMP, nullable=False, default=utcnow)
    exit_timestamp = Column(TIMESTAMP, nullable=True)

    spot = relationship(ParkingSpot, lazy="joined")

    @property
    def is_open(self) -> bool:
        return self.exit_timestamp is None

    def __repr__(self):
        return f"<Ticket {self.id} {self.license_plate} spot={self.spot_number}>"
