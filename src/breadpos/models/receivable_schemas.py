"""Pydantic schemas for charge customers and receivables."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breadpos.core.validators import sanitize_html, validate_currency, validate_email, validate_phone
from breadpos.models.enums import PaymentMethod, ReceivableStatus


class ChargeCustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(None, max_length=300)
    tin: str | None = Field(None, max_length=30)
    contact_person: str | None = Field(None, max_length=100)
    mobile: str | None = Field(None, max_length=30)
    email: str | None = Field(None, max_length=200)

    @field_validator("name", "address", "contact_person")
    @classmethod
    def validate_text(cls, v: str | None) -> str | None:
        return sanitize_html(v)

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str | None) -> str | None:
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str | None) -> str | None:
        return validate_email(v)


class ChargeCustomerCreate(ChargeCustomerBase):
    pass


class ChargeCustomerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = Field(None, max_length=300)
    tin: str | None = Field(None, max_length=30)
    contact_person: str | None = Field(None, max_length=100)
    mobile: str | None = Field(None, max_length=30)
    email: str | None = Field(None, max_length=200)
    is_active: bool | None = None

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str | None) -> str | None:
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str | None) -> str | None:
        return validate_email(v)


class ChargeCustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    address: str | None
    tin: str | None
    contact_person: str | None
    mobile: str | None
    email: str | None
    is_active: bool
    created_at: datetime


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod = PaymentMethod.CASH
    reference: str | None = Field(None, max_length=100)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: PaymentMethod) -> PaymentMethod:
        if v == PaymentMethod.CHARGE:
            raise ValueError("A receivable cannot be paid by charge")
        return v


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    amount: Decimal
    method: str
    reference: str | None
    received_by: str
    created_at: datetime


class ReceivableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sale_id: UUID
    sale_number: str
    date_key: str
    customer_id: UUID | None
    customer_name: str
    total: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: ReceivableStatus
    created_at: datetime
    payments: list[PaymentRead] = Field(default_factory=list)


class CustomerBalance(BaseModel):
    customer_id: UUID | None
    customer_name: str
    balance: Decimal
    receivable_count: int


class ReceivableDashboard(BaseModel):
    outstanding_total: Decimal
    unpaid_count: int
    overdue_7_days: Decimal
    overdue_30_days: Decimal
    by_customer: list[CustomerBalance]


class SyncResult(BaseModel):
    created: int
