# File: src/breadpos/api/inventory.py
"""Raw material alerts and the deduction dead-letter queue."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from breadpos.api.auth_helpers import require_admin, require_baker, require_manager
from breadpos.api.stock import get_stock_broker
from breadpos.core.db import get_db, get_session_factory
from breadpos.core.events import StockBroker
from breadpos.core.logging import get_logger
from breadpos.core.tasks import list_open_failures, retry_failure
from breadpos.models import Material, Staff
from breadpos.models.catalog_schemas import MaterialRead
from breadpos.models.stock_schemas import DeductionFailureRead

logger = get_logger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/low-stock", response_model=list[MaterialRead])
async def low_stock_materials(
    current_staff: Staff = Depends(require_baker),
    db: AsyncSession = Depends(get_db),
):
    """Ingredients and packaging at or below their reorder level."""
    stmt = (
        select(Material)
        .where(Material.current_stock <= Material.reorder_level)
        .order_by(Material.kind, Material.name)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/deduction-failures", response_model=list[DeductionFailureRead])
async def deduction_failures(
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await list_open_failures(db)


@router.post("/deduction-failures/{failure_id}/retry", response_model=DeductionFailureRead)
async def retry_deduction_failure(
    failure_id: UUID,
    current_staff: Staff = Depends(require_admin),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    broker: StockBroker = Depends(get_stock_broker),
):
    """Replay a failed job. Stays open with the new error if it fails again."""
    logger.info("deduction.retry_requested", failure_id=str(failure_id), requested_by=current_staff.name)
    return await retry_failure(session_factory, failure_id, current_staff.name, broker)
