"""Runtime POS settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth import get_current_staff
from breadpos.api.auth_helpers import require_admin
from breadpos.core.db import get_db
from breadpos.core.logging import get_logger
from breadpos.models import PosSettings, Staff
from breadpos.models.settings import POS_SETTINGS_ID
from breadpos.models.settings_schemas import PosSettingsRead, PosSettingsUpdate
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


async def get_pos_settings(db: AsyncSession) -> PosSettings:
    """The single settings row, created with defaults on first use."""
    settings = await db.get(PosSettings, POS_SETTINGS_ID)
    if settings is None:
        settings = PosSettings(
            id=POS_SETTINGS_ID,
            require_gcash_photo=True,
            require_discount_id_photo=True,
            low_stock_threshold=5,
            updated_at=now_utc(),
        )
        db.add(settings)
        await db.flush()
    return settings


@router.get("", response_model=PosSettingsRead)
async def read_settings(
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    return await get_pos_settings(db)


@router.put("", response_model=PosSettingsRead)
async def update_settings(
    patch: PosSettingsUpdate,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    settings = await get_pos_settings(db)
    changes = patch.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(settings, field, value)
    settings.updated_at = now_utc()
    settings.updated_by = current_staff.name
    await db.flush()

    logger.info("settings.updated", changes=changes, updated_by=current_staff.name)
    return settings
