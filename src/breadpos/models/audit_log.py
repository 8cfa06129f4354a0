"""Audit logging model for admin edits to shifts and sales."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc


class AuditLog(Base):
    """Immutable audit trail for admin modifications."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # WHICH RECORD
    entity_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)  # "SHIFT", "SALE"
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # WHO
    changed_by: Mapped[str] = mapped_column(String(100), nullable=False)

    # WHEN
    changed_at: Mapped[datetime] = mapped_column(default=now_utc)

    # WHAT
    action: Mapped[str] = mapped_column(String(30), nullable=False)  # "EDIT", "DELETE", "REMOVE_ITEM"

    changed_fields: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    old_values: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    new_values: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AuditLog(entity={self.entity_type}:{self.entity_id}, "
            f"action={self.action}, changed_by={self.changed_by})>"
        )
