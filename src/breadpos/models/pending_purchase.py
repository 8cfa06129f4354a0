# File: src/breadpos/models/pending_purchase.py
"""Emergency purchases paid from the drawer, awaiting approval."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.models.enums import PurchaseStatus
from breadpos.utils.datetime import now_utc


class PendingPurchase(Base):
    """One expense line entered when a shift ends."""

    __tablename__ = "pending_purchases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=False,
        index=True,
    )

    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    staff_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff.id"), nullable=False)
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PurchaseStatus.PENDING_APPROVAL.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
