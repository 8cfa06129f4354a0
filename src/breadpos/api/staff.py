# File: src/breadpos/api/staff.py
"""Staff management API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth_helpers import require_admin, require_manager
from breadpos.core.db import get_db
from breadpos.core.errors import ConflictError, NotFoundError
from breadpos.core.logging import get_logger
from breadpos.core.security import hash_pin
from breadpos.models import Staff
from breadpos.models.staff_schemas import StaffCreate, StaffRead

logger = get_logger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("", response_model=list[StaffRead])
async def list_staff(
    include_inactive: bool = False,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Staff).order_by(Staff.name)
    if not include_inactive:
        stmt = stmt.where(Staff.is_active)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED)
async def create_staff(
    payload: StaffCreate,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff member. Admin only."""
    existing = await db.execute(select(Staff).where(Staff.name == payload.name))
    if existing.scalar_one_or_none():
        raise ConflictError("Staff name already exists", details={"name": payload.name})

    staff = Staff(
        name=payload.name,
        hashed_pin=hash_pin(payload.pin),
        role=payload.role.value,
    )
    db.add(staff)
    await db.flush()
    await db.refresh(staff)

    logger.info("staff.created", staff_id=str(staff.id), role=staff.role, created_by=current_staff.name)
    return staff


@router.post("/{staff_id}/deactivate", response_model=StaffRead)
async def deactivate_staff(
    staff_id: UUID,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    staff = await db.get(Staff, staff_id)
    if staff is None:
        raise NotFoundError("Staff", str(staff_id))

    staff.is_active = False
    await db.flush()

    logger.info("staff.deactivated", staff_id=str(staff.id), deactivated_by=current_staff.name)
    return staff
