# File: src/breadpos/models/shift.py
"""Shift model for drawer tracking and cash reconciliation."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.models.enums import ShiftStatus
from breadpos.utils.datetime import now_utc

ZERO = Decimal("0.00")


class Shift(Base):
    """One cashier's drawer session, numbered sequentially per day."""

    __tablename__ = "shifts"
    __table_args__ = (UniqueConstraint("date_key", "shift_number", name="uq_shift_date_number"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    staff_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("staff.id"),
        nullable=False,
        index=True,
    )

    # Denormalized so reports survive staff renames
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)

    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    shift_number: Mapped[int] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ShiftStatus.ACTIVE.value,
        index=True,
    )

    start_time: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    end_time: Mapped[datetime | None] = mapped_column(nullable=True)

    starting_cash: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    actual_cash: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    expected_cash: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Sales partition, filled at shift end
    cash_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    gcash_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    other_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    total_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    transaction_count: Mapped[int] = mapped_column(nullable=False, default=0)
    total_expenses: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    variance: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    balance_status: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)

    notes: Mapped[str | None] = mapped_column(nullable=True)

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Audit fields
    last_modified_at: Mapped[datetime | None] = mapped_column(nullable=True)
    last_modified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == ShiftStatus.ACTIVE.value

    @property
    def adjusted_expected_cash(self) -> Decimal | None:
        """Expected drawer cash after emergency purchases paid from it."""
        if self.expected_cash is None:
            return None
        return self.expected_cash - (self.total_expenses or ZERO)

    def __repr__(self) -> str:
        return f"<Shift(date={self.date_key}, number={self.shift_number}, status={self.status})>"
