from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from app.database.session import Base
from app.models.mixins import PublicIdMixin


class DriverProfile(PublicIdMixin, Base):
    __tablename__ = "drivers"
    __table_args__ = {"extend_existing": True}

    # unique: a profile has at most one driver extension
    profile_ref_id = Column(Integer, ForeignKey("profiles.ref_id", ondelete="CASCADE"), unique=True, nullable=False)
    license_number = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="driver")
    vehicles = relationship("Vehicle", back_populates="driver", passive_deletes=True)
    trips = relationship("Trip", back_populates="driver", passive_deletes=True)

    @property
    def user_id(self):
        return self.profile.id if self.profile else None
