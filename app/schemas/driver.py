from pydantic import BaseModel, ConfigDict, Field
from app.schemas.base import UtcDateTime


class DriverCreate(BaseModel):
    license_number: str = Field(..., min_length=1, max_length=100)


class DriverResponse(BaseModel):
    id: str
    user_id: str
    license_number: str
    created_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True)
