# File: src/breadpos/models/sale.py
"""Sale and SaleItem models recorded at POS checkout."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc

ZERO = Decimal("0.00")


class Sale(Base):
    """A completed checkout. Immutable except for admin line removal or deletion."""

    __tablename__ = "sales"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Human-readable: S-YYYYMMDD-NNN
    sale_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    # Back-reference only; the sale does not belong to the shift
    shift_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=True,
        index=True,
    )
    shift_number: Mapped[int | None] = mapped_column(nullable=True)

    cashier_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff.id"), nullable=False)
    cashier_name: Mapped[str] = mapped_column(String(100), nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # CASH
    cash_received: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    change_due: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # GCASH
    gcash_ref_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gcash_photo: Mapped[str | None] = mapped_column(Text, nullable=True)

    # CHARGE
    charge_customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("charge_customers.id"),
        nullable=True,
    )
    customer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Senior/PWD ID capture for discounts that require it
    discount_id_photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_id_skipped: Mapped[bool] = mapped_column(default=False, nullable=False)

    source: Mapped[str] = mapped_column(String(20), nullable=False, default="pos")
    audit_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    last_modified_at: Mapped[datetime | None] = mapped_column(nullable=True)
    last_modified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.line_no",
        lazy="selectin",
    )

    def recompute_totals(self) -> None:
        """Rebuild subtotal, discount and total from the current lines.

        Lines built in memory have no discount until flushed, so a missing
        discount counts as zero.
        """
        self.subtotal = sum((item.original_price * item.quantity for item in self.items), ZERO)
        self.total_discount = sum(
            ((item.discount_amount or ZERO) * item.quantity for item in self.items), ZERO
        )
        self.total = sum((item.line_total for item in self.items), ZERO)

    def __repr__(self) -> str:
        return f"<Sale(number={self.sale_number}, total={self.total}, method={self.payment_method})>"


class SaleItem(Base):
    """One cart line as it was sold."""

    __tablename__ = "sale_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    sale_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no: Mapped[int] = mapped_column(nullable=False, default=0)

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )
    product_name: Mapped[str] = mapped_column(String(150), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    main_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    variant_index: Mapped[int | None] = mapped_column(nullable=True)
    variant_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity: Mapped[int] = mapped_column(nullable=False)
    original_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    discount_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    discount_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    discount_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=ZERO)
    # Per unit
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")

    @property
    def display_name(self) -> str:
        if self.variant_name:
            return f"{self.product_name} ({self.variant_name})"
        return self.product_name
