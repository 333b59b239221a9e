from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from app.schemas.base import UtcDateTime


def _require_one_brand_reference(brand_id: Optional[str], brand: Optional[str]) -> None:
    if brand_id and brand:
        raise ValueError("Provide either brand_id or brand, not both")
    if not brand_id and not brand:
        raise ValueError("Either brand_id or brand is required")


class VehicleBase(BaseModel):
    license_plate: str = Field(..., min_length=1, max_length=20)
    model: str = Field(..., min_length=1, max_length=100)
    # Brand can be referenced by id or by (case-insensitive) name
    brand_id: Optional[str] = None
    brand: Optional[str] = Field(None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def check_brand_reference(self):
        _require_one_brand_reference(self.brand_id, self.brand)
        return self

class VehicleCreate(VehicleBase):
    pass

class VehicleUpdate(VehicleBase):
    """Full replacement used by PUT."""

class VehiclePatch(BaseModel):
    license_plate: Optional[str] = Field(None, min_length=1, max_length=20)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    brand_id: Optional[str] = None
    brand: Optional[str] = Field(None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def check_model_has_brand(self):
        if self.model is not None or self.brand_id or self.brand:
            if self.model is None:
                raise ValueError("model is required when changing the brand")
            _require_one_brand_reference(self.brand_id, self.brand)
        return self

class VehicleResponse(BaseModel):
    id: str
    license_plate: str
    model_name: Optional[str] = None
    brand_name: Optional[str] = None
    driver_id: Optional[str] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())
