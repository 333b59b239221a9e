from sqlalchemy import (
    Column, Integer, DateTime, ForeignKey, Enum, CheckConstraint, func, select
)
from sqlalchemy.orm import column_property, relationship
from enum import Enum as PyEnum

from app.database.session import Base
from app.models.mixins import PublicIdMixin
from app.models.inscription import Inscription, InscriptionStatusEnum


class CityTripTypeEnum(str, PyEnum):
    DEPARTURE = "DEPARTURE"
    ARRIVAL = "ARRIVAL"


class Trip(PublicIdMixin, Base):
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("seats > 0", name="ck_trip_seats_positive"),
        CheckConstraint("distance_km > 0", name="ck_trip_distance_positive"),
        {"extend_existing": True},
    )

    # Stored as naive UTC
    departure_at = Column(DateTime, nullable=False, index=True)
    distance_km = Column(Integer, nullable=False)
    seats = Column(Integer, nullable=False)

    driver_ref_id = Column(Integer, ForeignKey("drivers.ref_id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_ref_id = Column(Integer, ForeignKey("vehicles.ref_id", ondelete="RESTRICT"), nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    driver = relationship("DriverProfile", back_populates="trips")
    vehicle = relationship("Vehicle")
    city_links = relationship(
        "TripCity",
        back_populates="trip",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    inscriptions = relationship("Inscription", back_populates="trip", passive_deletes="all")

    def _city(self, city_type: CityTripTypeEnum):
        for link in self.city_links:
            if link.type == city_type:
                return link.city
        return None

    @property
    def departure_city(self):
        city = self._city(CityTripTypeEnum.DEPARTURE)
        return city.name if city else None

    @property
    def arrival_city(self):
        city = self._city(CityTripTypeEnum.ARRIVAL)
        return city.name if city else None

    @property
    def driver_id(self):
        return self.driver.id if self.driver else None

    @property
    def vehicle_id(self):
        return self.vehicle.id if self.vehicle else None

    @property
    def available_seats(self) -> int:
        return max(self.seats - self.active_inscription_count, 0)


# Counted in SQL; listings undefer it so no trip loads its inscriptions
Trip.active_inscription_count = column_property(
    select(func.count(Inscription.ref_id))
    .where(Inscription.trip_ref_id == Trip.ref_id, Inscription.status == InscriptionStatusEnum.ACTIVE)
    .correlate_except(Inscription)
    .scalar_subquery(),
    deferred=True,
)


class TripCity(Base):
    """Typed join between a trip and a city; keyed by (trip, type) so each role appears once."""
    __tablename__ = "trip_cities"
    __table_args__ = {"extend_existing": True}

    trip_ref_id = Column(Integer, ForeignKey("trips.ref_id", ondelete="CASCADE"), primary_key=True)
    type = Column(Enum(CityTripTypeEnum, native_enum=False), primary_key=True)
    city_ref_id = Column(Integer, ForeignKey("cities.ref_id", ondelete="RESTRICT"), nullable=False, index=True)

    trip = relationship("Trip", back_populates="city_links")
    city = relationship("City", lazy="joined")
