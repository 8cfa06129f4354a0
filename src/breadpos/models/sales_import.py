# File: src/breadpos/models/sales_import.py
"""Imported external sales batches and the name mappings they build up."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breadpos.core.db import Base
from breadpos.models.enums import MappingSource
from breadpos.utils.datetime import now_utc

ZERO = Decimal("0.00")


class ProductMapping(Base):
    """External item name (case-folded) -> catalog product/variant."""

    __tablename__ = "product_mappings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    external_key: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    external_name: Mapped[str] = mapped_column(String(200), nullable=False)

    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("products.id"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(150), nullable=False)
    variant_index: Mapped[int | None] = mapped_column(nullable=True)
    variant_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    source: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=MappingSource.MANUAL.value,
    )
    score: Mapped[Decimal | None] = mapped_column(Numeric(4, 3), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)


class SalesImport(Base):
    """One committed import batch."""

    __tablename__ = "sales_imports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    imported_by: Mapped[str] = mapped_column(String(100), nullable=False)
    items_file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    daily_file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    total_items: Mapped[int] = mapped_column(nullable=False, default=0)
    imported_items: Mapped[int] = mapped_column(nullable=False, default=0)
    skipped_items: Mapped[int] = mapped_column(nullable=False, default=0)
    total_quantity: Mapped[int] = mapped_column(nullable=False, default=0)

    total_gross_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_discounts: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_net_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    days_count: Mapped[int] = mapped_column(nullable=False, default=0)
    skipped_days: Mapped[int] = mapped_column(nullable=False, default=0)
    date_from: Mapped[str | None] = mapped_column(String(10), nullable=True)
    date_to: Mapped[str | None] = mapped_column(String(10), nullable=True)

    items: Mapped[list["SalesImportItem"]] = relationship(
        "SalesImportItem",
        back_populates="sales_import",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    days: Mapped[list["SalesImportDay"]] = relationship(
        "SalesImportDay",
        back_populates="sales_import",
        cascade="all, delete-orphan",
        order_by="SalesImportDay.date_key",
        lazy="selectin",
    )


class SalesImportItem(Base):
    """Item-level aggregate of one import, priced with the internal cost basis."""

    __tablename__ = "sales_import_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    import_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_imports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    external_name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    product_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("products.id"),
        nullable=True,
        index=True,
    )
    product_name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    variant_index: Mapped[int | None] = mapped_column(nullable=True)
    variant_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    gross_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    discounts: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    net_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    margin_percent: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False, default=ZERO)

    sales_import: Mapped["SalesImport"] = relationship("SalesImport", back_populates="items")


class SalesImportDay(Base):
    """Day summary. A day-key can be imported once across all batches."""

    __tablename__ = "sales_import_days"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    import_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_imports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, unique=True, index=True)

    gross_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    discounts: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    net_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    # As reported by the external system; kept for reference, never used for profit
    reported_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    sales_import: Mapped["SalesImport"] = relationship("SalesImport", back_populates="days")
