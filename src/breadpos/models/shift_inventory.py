# File: src/breadpos/models/shift_inventory.py
"""Start/end-of-shift inventory endorsements."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc

ZERO = Decimal("0.00")


class ShiftInventory(Base):
    """
    A handover count for one shift and phase.

    START records expected vs received. END records expected vs counted and
    the value of any shortage. Written once, never updated.
    """

    __tablename__ = "shift_inventory"
    __table_args__ = (UniqueConstraint("shift_id", "phase", name="uq_shift_inventory_phase"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=False,
        index=True,
    )
    phase: Mapped[str] = mapped_column(String(10), nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    staff_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff.id"), nullable=False)
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)

    total_expected: Mapped[int] = mapped_column(nullable=False, default=0)
    total_counted: Mapped[int] = mapped_column(nullable=False, default=0)
    total_variance: Mapped[int] = mapped_column(nullable=False, default=0)
    total_shortage_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    total_shortage_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=ZERO
    )

    notes: Mapped[str | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    lines: Mapped[list["ShiftInventoryLine"]] = relationship(
        "ShiftInventoryLine",
        back_populates="endorsement",
        cascade="all, delete-orphan",
        order_by="ShiftInventoryLine.line_no",
        lazy="selectin",
    )


class ShiftInventoryLine(Base):
    """Per-product row of an endorsement."""

    __tablename__ = "shift_inventory_lines"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    endorsement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shift_inventory.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no: Mapped[int] = mapped_column(nullable=False, default=0)

    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("products.id"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(150), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # END phase only
    start_qty: Mapped[int | None] = mapped_column(nullable=True)
    sold_qty: Mapped[int | None] = mapped_column(nullable=True)

    expected_qty: Mapped[int] = mapped_column(nullable=False)
    counted_qty: Mapped[int] = mapped_column(nullable=False)
    variance: Mapped[int] = mapped_column(nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    shortage_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    endorsement: Mapped["ShiftInventory"] = relationship("ShiftInventory", back_populates="lines")
