# File: src/breadpos/models/staff.py
"""Staff model for PIN authentication."""

import uuid
from datetime import datetime

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.models.enums import StaffRole
from breadpos.utils.datetime import now_utc


class Staff(Base):
    """A person who logs into the POS with a PIN."""

    __tablename__ = "staff"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )

    hashed_pin: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StaffRole.STAFF.value,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
    )

    def has_role(self, minimum: StaffRole) -> bool:
        """True if this staff member's role ranks at or above ``minimum``."""
        return StaffRole(self.role).rank >= minimum.rank

    def __repr__(self) -> str:
        return f"<Staff(name={self.name}, role={self.role}, is_active={self.is_active})>"
