from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from app.schemas.base import UtcDateTime

from app.models.inscription import InscriptionStatusEnum


class InscriptionCreate(BaseModel):
    trip_id: str = Field(..., min_length=1)


class InscriptionResponse(BaseModel):
    id: str
    trip_id: Optional[str] = None
    rider_id: Optional[str] = None
    status: InscriptionStatusEnum
    created_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True)


class PassengerResponse(BaseModel):
    inscription_id: str
    rider_id: str
    first_name: str
    last_name: str
    status: InscriptionStatusEnum
    created_at: UtcDateTime
