"""Discount preset endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth import get_current_staff
from breadpos.api.auth_helpers import require_admin
from breadpos.core.cart import infer_requires_id
from breadpos.core.db import get_db
from breadpos.core.errors import ConflictError, NotFoundError
from breadpos.core.logging import get_logger
from breadpos.models import DiscountPreset, Staff
from breadpos.models.settings_schemas import (
    DiscountPresetCreate,
    DiscountPresetRead,
    DiscountPresetUpdate,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.get("", response_model=list[DiscountPresetRead])
async def list_discounts(
    include_inactive: bool = False,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(DiscountPreset).order_by(DiscountPreset.sort_order, DiscountPreset.name)
    if not include_inactive:
        stmt = stmt.where(DiscountPreset.is_active)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=DiscountPresetRead, status_code=status.HTTP_201_CREATED)
async def create_discount(
    payload: DiscountPresetCreate,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a preset. When requires_id is omitted it is inferred from the id and name."""
    if await db.get(DiscountPreset, payload.id) is not None:
        raise ConflictError("Discount id already exists", details={"id": payload.id})

    requires_id = payload.requires_id
    if requires_id is None:
        requires_id = infer_requires_id(payload.id, payload.name)

    preset = DiscountPreset(
        id=payload.id,
        name=payload.name,
        percent=payload.percent,
        icon=payload.icon,
        requires_id=requires_id,
        sort_order=payload.sort_order,
    )
    db.add(preset)
    await db.flush()

    logger.info(
        "discount.created",
        discount_id=preset.id,
        percent=str(preset.percent),
        requires_id=preset.requires_id,
        created_by=current_staff.name,
    )
    return preset


@router.patch("/{discount_id}", response_model=DiscountPresetRead)
async def update_discount(
    discount_id: str,
    patch: DiscountPresetUpdate,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    preset = await db.get(DiscountPreset, discount_id)
    if preset is None:
        raise NotFoundError("DiscountPreset", discount_id)

    changes = patch.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(preset, field, value)
    await db.flush()

    logger.info("discount.updated", discount_id=preset.id, changes=list(changes), updated_by=current_staff.name)
    return preset


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_discount(
    discount_id: str,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate rather than delete; past sales still name the preset."""
    preset = await db.get(DiscountPreset, discount_id)
    if preset is None:
        raise NotFoundError("DiscountPreset", discount_id)
    preset.is_active = False

    logger.info("discount.deactivated", discount_id=preset.id, deactivated_by=current_staff.name)
