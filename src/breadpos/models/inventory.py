# File: src/breadpos/models/inventory.py
"""Daily finished-goods stock and its movement log."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.models.enums import MovementType
from breadpos.utils.datetime import now_utc


class DailyInventory(Base):
    """Stock of one product for one day."""

    __tablename__ = "daily_inventory"
    __table_args__ = (UniqueConstraint("date_key", "product_id", name="uq_daily_inventory_day_product"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )
    product_name: Mapped[str] = mapped_column(String(150), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    carryover_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    new_production_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    total_available: Mapped[int] = mapped_column(nullable=False, default=0)
    reserved_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    sold_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    cancelled_qty: Mapped[int] = mapped_column(nullable=False, default=0)

    sold_out_at: Mapped[datetime | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    @property
    def sellable(self) -> int:
        """Units still available to sell today; never negative."""
        # reconciliation imports the models package
        from breadpos.core.reconciliation import sellable_quantity

        return sellable_quantity(self.total_available, self.reserved_qty, self.sold_qty, self.cancelled_qty)


class StockMovement(Base):
    """Append-only record of each change to a day's stock."""

    __tablename__ = "stock_movements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("products.id"), nullable=False)
    movement_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MovementType.SALE.value,
    )
    # Negative for deductions
    quantity: Mapped[int] = mapped_column(nullable=False)
    sold_after: Mapped[int] = mapped_column(nullable=False, default=0)

    sale_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    sale_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    performed_by: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
