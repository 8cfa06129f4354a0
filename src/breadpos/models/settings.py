# File: src/breadpos/models/settings.py
"""Discount presets and runtime POS settings."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc

# Single-row table
POS_SETTINGS_ID = 1


class DiscountPreset(Base):
    """A named percentage discount selectable at the register."""

    __tablename__ = "discount_presets"

    # Slug, e.g. "senior"
    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(10), nullable=True)
    requires_id: Mapped[bool] = mapped_column(default=False, nullable=False)

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(nullable=False, default=0)


class PosSettings(Base):
    """Toggles admins change without a deploy."""

    __tablename__ = "pos_settings"

    id: Mapped[int] = mapped_column(primary_key=True, default=POS_SETTINGS_ID)

    require_gcash_photo: Mapped[bool] = mapped_column(default=True, nullable=False)
    require_discount_id_photo: Mapped[bool] = mapped_column(default=True, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(nullable=False, default=5)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
