"""Pydantic schemas for daily finished-goods stock."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StockRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    product_name: str
    category: str | None
    date_key: str
    carryover_qty: int
    new_production_qty: int
    total_available: int
    reserved_qty: int
    sold_qty: int
    cancelled_qty: int
    sellable: int
    sold_out_at: datetime | None
    status: str = ""


class StockStatus(BaseModel):
    product_id: UUID
    date_key: str
    sellable: int | None
    status: str


class StockCheckRequest(BaseModel):
    product_id: UUID
    requested_qty: int = Field(1, ge=1)
    current_cart_qty: int = Field(0, ge=0)


class StockCheckResponse(BaseModel):
    allowed: bool
    needed: int
    available: int | None
    warning: str | None = None


class StockUpdate(BaseModel):
    """Baker's daily figures. total_available = carryover + new production."""

    carryover_qty: int = Field(0, ge=0)
    new_production_qty: int = Field(0, ge=0)
    reserved_qty: int = Field(0, ge=0)
    cancelled_qty: int = Field(0, ge=0)


class DeductionFailureRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sale_id: UUID
    sale_number: str
    job: str
    payload: list[dict[str, Any]]
    error: str
    attempts: int
    created_at: datetime
    resolved_at: datetime | None
