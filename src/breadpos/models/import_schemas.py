# File: src/breadpos/models/import_schemas.py
"""Pydantic schemas for the sales import reconciler."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from breadpos.models.enums import MappingSource


class MatchRead(BaseModel):
    product_id: UUID
    product_name: str
    variant_index: int | None = None
    variant_name: str | None = None
    label: str
    score: float | None = None


class PreviewRow(BaseModel):
    external_name: str
    sku: str | None
    category: str | None
    quantity: int
    gross_sales: Decimal
    discounts: Decimal
    net_sales: Decimal
    status: str  # MAPPED, AUTO or UNMAPPED
    match: MatchRead | None = None
    # Best guess below the auto-match threshold, pre-filled for the operator
    suggestion: MatchRead | None = None


class PreviewDay(BaseModel):
    date_key: str
    gross_sales: Decimal
    net_sales: Decimal
    discounts: Decimal
    is_new: bool


class ImportPreview(BaseModel):
    rows: list[PreviewRow]
    days: list[PreviewDay]
    mapped_count: int
    auto_count: int
    unmapped_count: int
    total_quantity: int
    total_gross_sales: Decimal
    total_net_sales: Decimal
    new_days: list[str]
    already_imported_days: list[str]
    duplicate_days_in_file: list[str]
    import_items: bool
    warnings: list[str] = Field(default_factory=list)


class MappingIn(BaseModel):
    external_name: str = Field(..., min_length=1, max_length=200)
    product_id: UUID
    variant_index: int | None = Field(None, ge=0)


class MappingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_name: str
    product_id: UUID
    product_name: str
    variant_index: int | None
    variant_name: str | None
    source: MappingSource
    score: Decimal | None
    updated_at: datetime


class SalesImportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    label: str | None
    imported_by: str
    items_file_name: str | None
    daily_file_name: str | None
    total_items: int
    imported_items: int
    skipped_items: int
    total_quantity: int
    total_gross_sales: Decimal
    total_discounts: Decimal
    total_net_sales: Decimal
    total_cost: Decimal
    total_profit: Decimal
    days_count: int
    skipped_days: int
    date_from: str | None
    date_to: str | None


class SalesImportItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_name: str
    sku: str | None
    category: str | None
    product_id: UUID | None
    product_name: str | None
    variant_name: str | None
    quantity: int
    gross_sales: Decimal
    discounts: Decimal
    net_sales: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    profit: Decimal
    margin_percent: Decimal


class SalesImportDayRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date_key: str
    gross_sales: Decimal
    discounts: Decimal
    net_sales: Decimal
    reported_cost: Decimal


class SalesImportDetail(SalesImportRead):
    items: list[SalesImportItemRead]
    days: list[SalesImportDayRead]


class ImportResult(BaseModel):
    batch: SalesImportRead
    warnings: list[str] = Field(default_factory=list)
