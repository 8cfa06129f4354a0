"""Pydantic schemas for discount presets and POS settings."""

import re
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breadpos.core.validators import sanitize_html

_SLUG = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


class DiscountPresetCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=40)
    name: str = Field(..., min_length=1, max_length=100)
    percent: Decimal = Field(..., gt=0, le=100)
    icon: str | None = Field(None, max_length=10)
    # None means: infer from the id/name
    requires_id: bool | None = None
    sort_order: int = 0

    @field_validator("id")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        v = v.strip().lower()
        if not _SLUG.match(v):
            raise ValueError("Discount id must be lowercase letters, digits, '-' or '_'")
        if v == "custom":
            raise ValueError("'custom' is reserved for ad-hoc discounts")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = sanitize_html(v)
        if not cleaned:
            raise ValueError("Name cannot be empty")
        return cleaned


class DiscountPresetUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    percent: Decimal | None = Field(None, gt=0, le=100)
    icon: str | None = Field(None, max_length=10)
    requires_id: bool | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class DiscountPresetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    percent: Decimal
    icon: str | None
    requires_id: bool
    is_active: bool
    sort_order: int


class PosSettingsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    require_gcash_photo: bool
    require_discount_id_photo: bool
    low_stock_threshold: int
    updated_at: datetime
    updated_by: str | None


class PosSettingsUpdate(BaseModel):
    require_gcash_photo: bool | None = None
    require_discount_id_photo: bool | None = None
    low_stock_threshold: int | None = Field(None, ge=0, le=1000)
