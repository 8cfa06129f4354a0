"""Pydantic schemas for reports."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class DailySalesRow(BaseModel):
    date_key: str
    pos_sales: Decimal
    pos_transactions: int
    import_sales: Decimal
    total_sales: Decimal


class MonthlySalesRow(BaseModel):
    month: str  # YYYY-MM
    pos_sales: Decimal
    pos_transactions: int
    import_sales: Decimal
    total_sales: Decimal


class DailySalesReport(BaseModel):
    date_from: str
    date_to: str
    total_sales: Decimal
    rows: list[DailySalesRow]


class MonthlySalesReport(BaseModel):
    date_from: str
    date_to: str
    total_sales: Decimal
    rows: list[MonthlySalesRow]


class ProductSalesRow(BaseModel):
    product_id: UUID | None
    product_name: str
    category: str | None
    quantity: int
    sales: Decimal


class CategorySalesRow(BaseModel):
    category: str
    quantity: int
    sales: Decimal


class ShiftVarianceRow(BaseModel):
    shift_id: UUID
    date_key: str
    shift_number: int
    staff_name: str
    total_sales: Decimal
    expected_cash: Decimal | None
    actual_cash: Decimal | None
    variance: Decimal | None
    balance_status: str | None


class PaymentBreakdown(BaseModel):
    cash: Decimal
    gcash: Decimal
    other: Decimal


class TodayStats(BaseModel):
    date_key: str
    total_sales: Decimal
    transaction_count: int
    average_ticket: Decimal
    total_discount: Decimal
    payments: PaymentBreakdown
    active_shifts: int
    sold_out_products: list[str] = Field(default_factory=list)
    low_stock_materials: list[str] = Field(default_factory=list)
