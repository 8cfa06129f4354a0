"""Start/end-of-shift inventory endorsement endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth import get_current_staff
from breadpos.api.shift_helpers import ensure_shift_access, get_shift_or_404, shift_sold_quantities
from breadpos.core.db import get_db
from breadpos.core.endorsement import (
    ScoredCount,
    SheetLine,
    build_end_sheet,
    build_start_sheet,
    score_counts,
)
from breadpos.core.errors import ConflictError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import ZERO
from breadpos.core.stock import get_day_records
from breadpos.models import Product, Shift, ShiftInventory, ShiftInventoryLine, Staff
from breadpos.models.enums import EndorsementPhase
from breadpos.models.shift_inventory_schemas import (
    EndorsementCreate,
    EndorsementLineRead,
    EndorsementRead,
    EndSheetLine,
    ShiftInventoryReport,
    ShortageReport,
    StartSheetLine,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/shifts/{shift_id}/inventory", tags=["shift-inventory"])


async def _endorsement(db: AsyncSession, shift_id: UUID, phase: EndorsementPhase) -> ShiftInventory | None:
    stmt = select(ShiftInventory).where(
        ShiftInventory.shift_id == shift_id,
        ShiftInventory.phase == phase.value,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _products(db: AsyncSession, product_ids) -> dict[UUID, Product]:
    ids = list(product_ids)
    if not ids:
        return {}
    result = await db.execute(select(Product).where(Product.id.in_(ids)))
    return {product.id: product for product in result.scalars().all()}


async def _end_sheet(db: AsyncSession, shift: Shift) -> list[SheetLine]:
    records = await get_day_records(db, shift.date_key)
    start = await _endorsement(db, shift.id, EndorsementPhase.START)
    sold = await shift_sold_quantities(db, shift.id)
    products = await _products(db, set(records) | set(sold))
    return build_end_sheet(records, start.lines if start else None, sold, products)


async def _save(
    db: AsyncSession,
    shift: Shift,
    phase: EndorsementPhase,
    scored: list[ScoredCount],
    current_staff: Staff,
    notes: str | None,
) -> ShiftInventory:
    if await _endorsement(db, shift.id, phase) is not None:
        raise ConflictError(
            f"{phase.value.title()} inventory already recorded for this shift",
            details={"shift_id": str(shift.id), "phase": phase.value},
        )

    endorsement = ShiftInventory(
        shift_id=shift.id,
        phase=phase.value,
        date_key=shift.date_key,
        staff_id=current_staff.id,
        staff_name=current_staff.name,
        total_expected=sum(s.sheet.expected_qty for s in scored),
        total_counted=sum(s.counted_qty for s in scored),
        total_variance=sum(s.variance for s in scored),
        total_shortage_qty=sum(s.shortage_qty for s in scored) if phase == EndorsementPhase.END else 0,
        total_shortage_value=(
            sum((s.shortage_value for s in scored), ZERO) if phase == EndorsementPhase.END else ZERO
        ),
        notes=notes,
    )
    for line_no, s in enumerate(scored, start=1):
        endorsement.lines.append(
            ShiftInventoryLine(
                line_no=line_no,
                product_id=s.sheet.product_id,
                product_name=s.sheet.product_name,
                category=s.sheet.category,
                start_qty=s.sheet.start_qty,
                sold_qty=s.sheet.sold_qty,
                expected_qty=s.sheet.expected_qty,
                counted_qty=s.counted_qty,
                variance=s.variance,
                unit_price=s.sheet.unit_price,
                shortage_value=s.shortage_value if phase == EndorsementPhase.END else ZERO,
            )
        )

    db.add(endorsement)
    try:
        await db.flush()
    except IntegrityError as e:
        raise ConflictError(f"{phase.value.title()} inventory already recorded for this shift") from e

    logger.info(
        "shift_inventory.recorded",
        shift_id=str(shift.id),
        phase=phase.value,
        lines=len(scored),
        total_variance=endorsement.total_variance,
        total_shortage_value=str(endorsement.total_shortage_value),
    )
    return endorsement


def _extra_lines(counts: dict[UUID, int], sheet: list[SheetLine], products: dict[UUID, Product]) -> dict[UUID, SheetLine]:
    on_sheet = {line.product_id for line in sheet}
    return {
        product_id: SheetLine(
            product_id=product_id,
            product_name=products[product_id].name,
            category=products[product_id].category,
            expected_qty=0,
            unit_price=products[product_id].unit_price(),
        )
        for product_id in counts
        if product_id not in on_sheet and product_id in products
    }


@router.get("/start", response_model=list[StartSheetLine])
async def start_sheet(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Products the incoming cashier should find on the shelf."""
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)
    records = await get_day_records(db, shift.date_key)
    return [
        StartSheetLine(
            product_id=line.product_id,
            product_name=line.product_name,
            category=line.category,
            expected_qty=line.expected_qty,
        )
        for line in build_start_sheet(list(records.values()))
    ]


@router.post("/start", response_model=EndorsementRead, status_code=status.HTTP_201_CREATED)
async def record_start(
    shift_id: UUID,
    payload: EndorsementCreate,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Record what was received. Advisory: the shift runs whether or not it matches."""
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)

    records = await get_day_records(db, shift.date_key)
    sheet = build_start_sheet(list(records.values()))
    counts = {line.product_id: line.counted_qty for line in payload.lines}
    products = await _products(db, counts)
    scored = score_counts(sheet, counts, require_all=False, extra=_extra_lines(counts, sheet, products))

    return await _save(db, shift, EndorsementPhase.START, scored, current_staff, payload.notes)


@router.get("/end", response_model=list[EndSheetLine])
async def end_sheet(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)
    return [
        EndSheetLine(
            product_id=line.product_id,
            product_name=line.product_name,
            category=line.category,
            start_qty=line.start_qty or 0,
            sold_qty=line.sold_qty or 0,
            expected_qty=line.expected_qty,
            unit_price=line.unit_price,
        )
        for line in await _end_sheet(db, shift)
    ]


@router.post("/end", response_model=EndorsementRead, status_code=status.HTTP_201_CREATED)
async def record_end(
    shift_id: UUID,
    payload: EndorsementCreate,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Record the closing count. Every product on the end sheet must be counted."""
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)

    sheet = await _end_sheet(db, shift)
    counts = {line.product_id: line.counted_qty for line in payload.lines}
    products = await _products(db, counts)
    scored = score_counts(sheet, counts, require_all=True, extra=_extra_lines(counts, sheet, products))

    return await _save(db, shift, EndorsementPhase.END, scored, current_staff, payload.notes)


@router.get("", response_model=ShiftInventoryReport)
async def shift_inventory(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)
    start = await _endorsement(db, shift.id, EndorsementPhase.START)
    end = await _endorsement(db, shift.id, EndorsementPhase.END)
    return ShiftInventoryReport(
        start=EndorsementRead.model_validate(start) if start else None,
        end=EndorsementRead.model_validate(end) if end else None,
    )


@router.get("/shortage", response_model=ShortageReport | None)
async def shortage_report(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Lines counted short at shift end; null when nothing is missing."""
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)

    end = await _endorsement(db, shift.id, EndorsementPhase.END)
    if end is None:
        return None
    short_lines = [line for line in end.lines if line.counted_qty < line.expected_qty]
    if not short_lines:
        return None

    return ShortageReport(
        shift_id=shift.id,
        staff_name=shift.staff_name,
        date_key=shift.date_key,
        lines=[EndorsementLineRead.model_validate(line) for line in short_lines],
        total_shortage_qty=end.total_shortage_qty,
        total_shortage_value=end.total_shortage_value,
    )
