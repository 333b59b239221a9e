from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum

from app.database.session import Base
from app.models.mixins import PublicIdMixin


class RoleEnum(str, PyEnum):
    USER = "USER"
    DRIVER = "DRIVER"
    ADMIN = "ADMIN"


class Account(PublicIdMixin, Base):
    __tablename__ = "accounts"
    __table_args__ = {"extend_existing": True}

    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(RoleEnum, native_enum=False), default=RoleEnum.USER, nullable=False)

    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="account", uselist=False)


class Profile(PublicIdMixin, Base):
    __tablename__ = "profiles"
    __table_args__ = {"extend_existing": True}

    account_ref_id = Column(Integer, ForeignKey("accounts.ref_id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)

    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    account = relationship("Account", back_populates="profile")
    driver = relationship("DriverProfile", back_populates="profile", uselist=False)
    inscriptions = relationship("Inscription", back_populates="rider", passive_deletes=True)

    @property
    def email(self):
        return self.account.email if self.account else None

    @property
    def role(self):
        return self.account.role if self.account else None
