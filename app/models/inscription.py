from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, Index, func, text
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum

from app.database.session import Base
from app.models.mixins import PublicIdMixin


class InscriptionStatusEnum(str, PyEnum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class Inscription(PublicIdMixin, Base):
    __tablename__ = "inscriptions"
    __table_args__ = (
        # At most one ACTIVE booking per (rider, trip); backs the duplicate check under concurrency
        Index(
            "uq_inscription_active_rider_trip",
            "rider_ref_id",
            "trip_ref_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
        Index("ix_inscription_trip_status", "trip_ref_id", "status"),
        {"extend_existing": True},
    )

    rider_ref_id = Column(Integer, ForeignKey("profiles.ref_id", ondelete="CASCADE"), nullable=False)
    trip_ref_id = Column(Integer, ForeignKey("trips.ref_id", ondelete="CASCADE"), nullable=False)
    status = Column(
        Enum(InscriptionStatusEnum, native_enum=False),
        default=InscriptionStatusEnum.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=func.now(), nullable=False)

    rider = relationship("Profile", back_populates="inscriptions")
    trip = relationship("Trip", back_populates="inscriptions")

    @property
    def rider_id(self):
        return self.rider.id if self.rider else None

    @property
    def trip_id(self):
        return self.trip.id if self.trip else None
