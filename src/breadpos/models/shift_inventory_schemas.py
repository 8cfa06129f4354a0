# File: src/breadpos/models/shift_inventory_schemas.py
"""Pydantic schemas for start/end-of-shift inventory endorsements."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breadpos.core.validators import sanitize_html
from breadpos.models.enums import EndorsementPhase


class StartSheetLine(BaseModel):
    """What the incoming cashier should find on the shelf."""

    product_id: UUID
    product_name: str
    category: str | None
    expected_qty: int


class EndSheetLine(BaseModel):
    product_id: UUID
    product_name: str
    category: str | None
    start_qty: int
    sold_qty: int
    expected_qty: int
    unit_price: Decimal


class CountLine(BaseModel):
    product_id: UUID
    counted_qty: int = Field(..., ge=0)


class EndorsementCreate(BaseModel):
    lines: list[CountLine] = Field(..., min_length=1)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_html(v)

    @field_validator("lines")
    @classmethod
    def validate_unique_products(cls, v: list[CountLine]) -> list[CountLine]:
        seen = set()
        for line in v:
            if line.product_id in seen:
                raise ValueError(f"Product {line.product_id} counted more than once")
            seen.add(line.product_id)
        return v


class EndorsementLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    product_name: str
    category: str | None
    start_qty: int | None
    sold_qty: int | None
    expected_qty: int
    counted_qty: int
    variance: int
    unit_price: Decimal
    shortage_value: Decimal


class EndorsementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    shift_id: UUID
    phase: EndorsementPhase
    date_key: str
    staff_name: str
    total_expected: int
    total_counted: int
    total_variance: int
    total_shortage_qty: int
    total_shortage_value: Decimal
    notes: str | None
    created_at: datetime
    lines: list[EndorsementLineRead]


class ShiftInventoryReport(BaseModel):
    start: EndorsementRead | None = None
    end: EndorsementRead | None = None


class ShortageReport(BaseModel):
    """Lines where fewer units were counted than expected at shift end."""

    shift_id: UUID
    staff_name: str
    date_key: str
    lines: list[EndorsementLineRead]
    total_shortage_qty: int
    total_shortage_value: Decimal
