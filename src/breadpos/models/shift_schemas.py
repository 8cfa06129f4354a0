# File: src/breadpos/models/shift_schemas.py
"""Pydantic schemas for the shift lifecycle."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breadpos.core.validators import sanitize_html, validate_currency
from breadpos.models.enums import BalanceStatus, ShiftStatus


class ShiftStart(BaseModel):
    """Schema for opening a drawer."""

    starting_cash: Decimal = Field(..., ge=0, decimal_places=2)

    @field_validator("starting_cash")
    @classmethod
    def validate_currency_fields(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class ExpenseLine(BaseModel):
    """Emergency purchase paid from the drawer during the shift."""

    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        cleaned = sanitize_html(v)
        if not cleaned:
            raise ValueError("Description cannot be empty")
        return cleaned


class ShiftEnd(BaseModel):
    """Schema for closing a drawer with the counted cash."""

    actual_cash: Decimal = Field(..., ge=0, decimal_places=2)
    expenses: list[ExpenseLine] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("actual_cash")
    @classmethod
    def validate_currency_fields(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_html(v)


class ShiftPatch(BaseModel):
    """Admin correction of a shift. Variance is recomputed from the new figures."""

    starting_cash: Decimal | None = Field(None, ge=0, decimal_places=2)
    actual_cash: Decimal | None = Field(None, ge=0, decimal_places=2)
    notes: str | None = Field(None, max_length=1000)
    reason: str = Field(..., min_length=1, max_length=500, description="Reason for edit")

    @field_validator("starting_cash", "actual_cash")
    @classmethod
    def validate_currency_fields(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("notes", "reason")
    @classmethod
    def validate_text_fields(cls, v: str | None) -> str | None:
        return sanitize_html(v)


class ShiftRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    staff_id: UUID
    staff_name: str
    role: str
    date_key: str
    shift_number: int
    status: ShiftStatus
    start_time: datetime
    end_time: datetime | None
    starting_cash: Decimal
    actual_cash: Decimal | None
    expected_cash: Decimal | None
    adjusted_expected_cash: Decimal | None
    cash_sales: Decimal
    gcash_sales: Decimal
    other_sales: Decimal
    total_sales: Decimal
    transaction_count: int
    total_expenses: Decimal
    variance: Decimal | None
    balance_status: BalanceStatus | None
    notes: str | None
    last_modified_at: datetime | None
    last_modified_by: str | None


class ShiftSummary(BaseModel):
    """Running cash partition of an active shift."""

    shift_id: UUID
    starting_cash: Decimal
    cash_sales: Decimal
    gcash_sales: Decimal
    other_sales: Decimal
    total_sales: Decimal
    transaction_count: int
    expected_cash: Decimal


class PendingPurchaseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    shift_id: UUID
    date_key: str
    description: str
    amount: Decimal
    staff_name: str
    status: str
    created_at: datetime


class ShiftEndResult(BaseModel):
    shift: ShiftRead
    purchases: list[PendingPurchaseRead] = Field(default_factory=list)
    # Expense lines whose purchase record could not be written
    failed_purchases: list[str] = Field(default_factory=list)
