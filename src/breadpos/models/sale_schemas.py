# File: src/breadpos/models/sale_schemas.py
"""Pydantic schemas for POS checkout and sale history."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from breadpos.core.validators import sanitize_html, validate_currency
from breadpos.models.enums import PaymentMethod


class CartLineIn(BaseModel):
    """One cart line as sent by the register. Prices come from the catalog, not the client."""

    product_id: UUID
    variant_index: int | None = Field(None, ge=0)
    quantity: int = Field(..., ge=1)
    discount_id: str | None = Field(None, max_length=40)
    # Ad-hoc discount when discount_id == "custom"
    custom_discount_name: str | None = Field(None, max_length=100)
    custom_discount_percent: Decimal | None = Field(None, gt=0, le=100)


class CheckoutRequest(BaseModel):
    items: list[CartLineIn] = Field(..., min_length=1)
    payment_method: PaymentMethod

    cash_received: Decimal | None = Field(None, ge=0)
    gcash_ref_no: str | None = Field(None, max_length=50)
    gcash_photo: str | None = None

    charge_customer_id: UUID | None = None
    charge_customer_name: str | None = Field(None, max_length=200)

    discount_id_photo: str | None = None
    discount_id_skipped: bool = False

    @field_validator("cash_received")
    @classmethod
    def validate_cash(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("gcash_ref_no", "charge_customer_name")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        cleaned = sanitize_html(v)
        return cleaned or None

    @model_validator(mode="after")
    def validate_custom_discounts(self) -> "CheckoutRequest":
        for item in self.items:
            if item.discount_id == "custom" and item.custom_discount_percent is None:
                raise ValueError("Custom discount requires custom_discount_percent")
        return self


class SaleItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    line_no: int
    product_id: UUID
    product_name: str
    display_name: str
    category: str | None
    variant_index: int | None
    variant_name: str | None
    quantity: int
    original_price: Decimal
    discount_id: str | None
    discount_name: str | None
    discount_percent: Decimal
    discount_amount: Decimal
    unit_price: Decimal
    line_total: Decimal


class SaleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sale_number: str
    date_key: str
    created_at: datetime
    shift_id: UUID | None
    shift_number: int | None
    cashier_name: str
    subtotal: Decimal
    total_discount: Decimal
    total: Decimal
    payment_method: PaymentMethod
    cash_received: Decimal | None
    change_due: Decimal | None
    gcash_ref_no: str | None
    charge_customer_id: UUID | None
    customer_name: str | None
    discount_id_skipped: bool
    source: str
    audit_notes: str | None
    is_deleted: bool
    items: list[SaleItemRead]


class CheckoutResponse(BaseModel):
    sale: SaleRead
    change_due: Decimal | None = None
    # Low-stock and untracked-product notes gathered while validating the cart
    warnings: list[str] = Field(default_factory=list)
