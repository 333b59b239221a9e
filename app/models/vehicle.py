from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from app.database.session import Base
from app.models.mixins import PublicIdMixin


class Brand(PublicIdMixin, Base):
    __tablename__ = "brands"
    __table_args__ = {"extend_existing": True}

    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    models = relationship("VehicleModel", back_populates="brand", passive_deletes=True)


class VehicleModel(PublicIdMixin, Base):
    __tablename__ = "vehicle_models"
    __table_args__ = {"extend_existing": True}

    # (name, brand_ref_id) is intentionally not unique: find-or-create is best effort
    name = Column(String(100), nullable=False, index=True)
    brand_ref_id = Column(Integer, ForeignKey("brands.ref_id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    brand = relationship("Brand", back_populates="models")
    vehicles = relationship("Vehicle", back_populates="model")


class Vehicle(PublicIdMixin, Base):
    __tablename__ = "vehicles"
    __table_args__ = {"extend_existing": True}

    license_plate = Column(String(20), unique=True, nullable=False)
    model_ref_id = Column(Integer, ForeignKey("vehicle_models.ref_id", ondelete="RESTRICT"), nullable=False)
    driver_ref_id = Column(Integer, ForeignKey("drivers.ref_id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    model = relationship("VehicleModel", back_populates="vehicles", lazy="joined")
    driver = relationship("DriverProfile", back_populates="vehicles")

    @property
    def model_name(self):
        return self.model.name if self.model else None

    @property
    def brand_name(self):
        return self.model.brand.name if self.model and self.model.brand else None

    @property
    def driver_id(self):
        return self.driver.id if self.driver else None
