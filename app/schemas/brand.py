from pydantic import BaseModel, ConfigDict, Field
from app.schemas.base import UtcDateTime


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class BrandResponse(BaseModel):
    id: str
    name: str
    created_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True)
