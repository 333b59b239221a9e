from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime, timezone

from app.schemas.base import UtcDateTime


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Trips are stored as naive UTC; aware inputs are converted, naive ones are taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TripCreate(BaseModel):
    departure_at: datetime
    distance_km: int = Field(..., gt=0)
    seats: int = Field(..., gt=0)
    departure_city: str = Field(..., min_length=1, max_length=150)
    arrival_city: str = Field(..., min_length=1, max_length=150)
    vehicle_id: str = Field(..., min_length=1)

    @field_validator("departure_at")
    @classmethod
    def normalize_departure(cls, value):
        return to_naive_utc(value)


class TripUpdate(BaseModel):
    departure_at: Optional[datetime] = None
    distance_km: Optional[int] = Field(None, gt=0)
    seats: Optional[int] = Field(None, gt=0)
    departure_city: Optional[str] = Field(None, min_length=1, max_length=150)
    arrival_city: Optional[str] = Field(None, min_length=1, max_length=150)
    vehicle_id: Optional[str] = Field(None, min_length=1)

    @field_validator("departure_at")
    @classmethod
    def normalize_departure(cls, value):
        return to_naive_utc(value)


class TripResponse(BaseModel):
    id: str
    departure_at: UtcDateTime
    distance_km: int
    seats: int
    available_seats: int
    departure_city: Optional[str] = None
    arrival_city: Optional[str] = None
    driver_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    created_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True)
