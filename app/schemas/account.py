from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional
from app.schemas.base import UtcDateTime

from app.models.account import RoleEnum


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: RoleEnum


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: Optional[RoleEnum] = None
    deleted_at: Optional[UtcDateTime] = None
    created_at: UtcDateTime

    model_config = ConfigDict(from_attributes=True)
