from sqlalchemy import Column, String, DateTime, func

from app.database.session import Base
from app.models.mixins import PublicIdMixin


class City(PublicIdMixin, Base):
    __tablename__ = "cities"
    __table_args__ = {"extend_existing": True}

    # Not unique: concurrent find-or-create of a new name may insert it twice
    name = Column(String(150), nullable=False, index=True)
    postal_code = Column(String(20), nullable=False, default="")
    created_at = Column(DateTime, default=func.now(), nullable=False)
