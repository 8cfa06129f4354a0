"""Helper functions shared by the shift and shift inventory endpoints."""

from collections import defaultdict
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.core.errors import NotFoundError
from breadpos.core.reconciliation import SalesPartition, partition_sales
from breadpos.models import Sale, SaleItem, Shift, Staff
from breadpos.models.enums import StaffRole


async def get_shift_or_404(db: AsyncSession, shift_id: UUID) -> Shift:
    shift = await db.get(Shift, shift_id)
    if shift is None or shift.is_deleted:
        raise NotFoundError("Shift", str(shift_id))
    return shift


def ensure_shift_access(shift: Shift, current_staff: Staff) -> None:
    """Cashiers see their own shifts; managers and up see all."""
    if shift.staff_id == current_staff.id or current_staff.has_role(StaffRole.MANAGER):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Permission denied",
    )


async def shift_sales_partition(db: AsyncSession, shift_id: UUID) -> SalesPartition:
    """Partition the shift's live sales by payment method."""
    stmt = select(Sale.payment_method, Sale.total).where(
        Sale.shift_id == shift_id,
        ~Sale.is_deleted,
    )
    result = await db.execute(stmt)
    return partition_sales(result.all())


async def shift_sold_quantities(db: AsyncSession, shift_id: UUID) -> dict[UUID, int]:
    """Units sold per product during the shift."""
    stmt = (
        select(SaleItem.product_id, func.sum(SaleItem.quantity))
        .join(Sale, Sale.id == SaleItem.sale_id)
        .where(Sale.shift_id == shift_id, ~Sale.is_deleted)
        .group_by(SaleItem.product_id)
    )
    result = await db.execute(stmt)
    sold: dict[UUID, int] = defaultdict(int)
    for product_id, quantity in result.all():
        sold[product_id] = int(quantity or 0)
    return sold


async def next_shift_number(db: AsyncSession, date_key: str) -> int:
    """Sequential per date, counting deleted shifts so numbers are never reused."""
    result = await db.execute(select(func.count(Shift.id)).where(Shift.date_key == date_key))
    return int(result.scalar_one()) + 1
