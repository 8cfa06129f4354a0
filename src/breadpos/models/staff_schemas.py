"""Pydantic schemas for staff and login."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breadpos.core.validators import validate_pin
from breadpos.models.enums import StaffRole


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    pin: str
    role: StaffRole = StaffRole.STAFF

    @field_validator("pin")
    @classmethod
    def validate_pin_format(cls, v: str) -> str:
        return validate_pin(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Name cannot be empty")
        return cleaned


class StaffRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    role: StaffRole
    is_active: bool
    created_at: datetime


class LoginRequest(BaseModel):
    """PIN login. Staff pick their name on the lock screen, then enter the PIN."""

    name: str = Field(..., min_length=1, max_length=100)
    pin: str = Field(..., min_length=1, max_length=8)


class SessionInfo(BaseModel):
    staff: StaffRead
    shift_id: UUID | None = None
    view_only: bool = False
