"""Audit logging utilities for tracking admin changes to shifts and sales."""

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.models.audit_log import AuditLog
from breadpos.utils.datetime import now_utc


def serialize_value(v: Any) -> Any:
    """Make a column value JSON-safe."""
    if isinstance(v, Decimal):
        return str(v)
    if isinstance(v, uuid.UUID):
        return str(v)
    if hasattr(v, "isoformat"):
        return v.isoformat()
    return v


async def log_change(
    db: AsyncSession,
    entity_type: str,
    entity_id: uuid.UUID,
    changed_by: str,
    action: str,
    old_values: dict[str, Any],
    new_values: dict[str, Any],
    reason: str | None = None,
) -> AuditLog:
    """Log an admin change to the audit trail.

    Args:
        db: Database session
        entity_type: "SHIFT" or "SALE"
        entity_id: ID of the modified record
        changed_by: Staff name making the change
        action: "EDIT", "DELETE" or "REMOVE_ITEM"
        old_values: Dict of {field_name: old_value}
        new_values: Dict of {field_name: new_value}
        reason: Optional reason for the change

    Returns:
        Created AuditLog record
    """
    # Only include fields that actually changed
    changed_fields = [k for k in old_values.keys() if old_values[k] != new_values.get(k)]

    audit_log = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        changed_by=changed_by,
        action=action,
        changed_fields=changed_fields,
        old_values={k: serialize_value(old_values[k]) for k in changed_fields},
        new_values={k: serialize_value(new_values.get(k)) for k in changed_fields},
        reason=reason,
        changed_at=now_utc(),
    )

    db.add(audit_log)
    return audit_log
