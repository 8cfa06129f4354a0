# File: src/breadpos/models/inventory_deduction.py
"""Ingredient deduction audit rows and the dead-letter table for failed jobs."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc


class InventoryDeductionLog(Base):
    """Materials drawn down for one sale. Written only when the batch succeeded."""

    __tablename__ = "inventory_deductions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    sale_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True, index=True)
    sale_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # [{"material_id", "name", "kind", "quantity"}]
    deductions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # Products that could not be walked (missing from catalog)
    errors: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    performed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)


class DeductionFailure(Base):
    """A post-sale deduction job that exhausted its retries."""

    __tablename__ = "deduction_failures"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    sale_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    sale_number: Mapped[str] = mapped_column(String(20), nullable=False)
    job: Mapped[str] = mapped_column(String(20), nullable=False)

    # Lines still to apply, so a retry does not double count what succeeded
    payload: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    error: Mapped[str] = mapped_column(Text, nullable=False)
    attempts: Mapped[int] = mapped_column(nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
