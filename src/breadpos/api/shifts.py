# File: src/breadpos/api/shifts.py
"""Shift lifecycle endpoints: start, view-only, summary, end, admin edit."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from breadpos.api.auth import find_active_shift, get_current_staff
from breadpos.api.auth_helpers import require_admin
from breadpos.api.shift_helpers import (
    ensure_shift_access,
    get_shift_or_404,
    next_shift_number,
    shift_sales_partition,
)
from breadpos.core.audit import log_change
from breadpos.core.cache import invalidate_reports
from breadpos.core.db import get_db
from breadpos.core.errors import ConflictError, InvalidStateError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import SalesPartition, reconcile_shift_cash
from breadpos.models import PendingPurchase, Shift, Staff
from breadpos.models.enums import VIEW_ONLY_ROLES, PurchaseStatus, ShiftStatus, StaffRole
from breadpos.models.shift_schemas import (
    PendingPurchaseRead,
    ShiftEnd,
    ShiftEndResult,
    ShiftPatch,
    ShiftRead,
    ShiftStart,
    ShiftSummary,
)
from breadpos.utils.datetime import date_key as to_date_key
from breadpos.utils.datetime import now_utc, today_key

logger = get_logger(__name__)

router = APIRouter(prefix="/shifts", tags=["shifts"])


@router.post("", response_model=ShiftRead, status_code=status.HTTP_201_CREATED)
async def start_shift(
    payload: ShiftStart,
    request: Request,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Open a drawer with the counted starting cash."""
    existing = await find_active_shift(db, current_staff.id)
    if existing is not None:
        raise ConflictError(
            "Staff member already has an active shift",
            details={"shift_id": str(existing.id)},
        )

    date_key = today_key()
    shift = Shift(
        staff_id=current_staff.id,
        staff_name=current_staff.name,
        role=current_staff.role,
        date_key=date_key,
        shift_number=await next_shift_number(db, date_key),
        status=ShiftStatus.ACTIVE.value,
        start_time=now_utc(),
        starting_cash=payload.starting_cash,
    )
    db.add(shift)
    try:
        await db.flush()
    except IntegrityError as e:
        # Another register took the same shift number
        raise ConflictError("Shift number already taken, try again") from e
    await db.refresh(shift)

    request.session["shift_id"] = str(shift.id)
    request.session["view_only"] = False

    logger.info(
        "shift.started",
        shift_id=str(shift.id),
        staff_id=str(current_staff.id),
        date_key=date_key,
        shift_number=shift.shift_number,
        starting_cash=str(shift.starting_cash),
    )
    return shift


@router.post("/view-only")
async def enter_view_only(
    request: Request,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Open the register without a drawer. Browsing only; checkout is refused."""
    if StaffRole(current_staff.role) not in VIEW_ONLY_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="View-only mode is for managers, owners and admins",
        )
    if await find_active_shift(db, current_staff.id) is not None:
        raise InvalidStateError("End your active shift before entering view-only mode")

    request.session["view_only"] = True
    request.session.pop("shift_id", None)

    logger.info("shift.view_only", staff_id=str(current_staff.id), role=current_staff.role)
    return {"view_only": True}


@router.get("/current", response_model=ShiftRead | None)
async def current_shift(
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    return await find_active_shift(db, current_staff.id)


@router.get("", response_model=list[ShiftRead])
async def list_shifts(
    date: date | None = None,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Shifts for a day (default today), in shift-number order."""
    date_key = to_date_key(date) if date else today_key()
    stmt = select(Shift).where(Shift.date_key == date_key, ~Shift.is_deleted)
    if not current_staff.has_role(StaffRole.MANAGER):
        stmt = stmt.where(Shift.staff_id == current_staff.id)
    result = await db.execute(stmt.order_by(Shift.shift_number))
    return result.scalars().all()


@router.get("/{shift_id}", response_model=ShiftRead)
async def get_shift(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)
    return shift


@router.get("/{shift_id}/summary", response_model=ShiftSummary)
async def shift_summary(
    shift_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Running totals shown before the cashier counts the drawer."""
    shift = await get_shift_or_404(db, shift_id)
    ensure_shift_access(shift, current_staff)

    sales = await shift_sales_partition(db, shift.id)
    return ShiftSummary(
        shift_id=shift.id,
        starting_cash=shift.starting_cash,
        cash_sales=sales.cash,
        gcash_sales=sales.gcash,
        other_sales=sales.other,
        total_sales=sales.total,
        transaction_count=sales.count,
        expected_cash=shift.starting_cash + sales.cash,
    )


@router.post("/{shift_id}/end", response_model=ShiftEndResult)
async def end_shift(
    shift_id: UUID,
    payload: ShiftEnd,
    request: Request,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """
    Close the drawer.

    The completed shift is committed first. Each expense then becomes a
    pending purchase in its own commit; one that fails is reported back in
    ``failed_purchases`` and the shift stays closed.
    """
    shift = await get_shift_or_404(db, shift_id)
    if shift.staff_id != current_staff.id and not current_staff.has_role(StaffRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the shift owner can end this shift",
        )
    if not shift.is_active:
        raise InvalidStateError(
            f"Shift is not active (current: {shift.status})",
            details={"shift_id": str(shift.id)},
        )

    sales = await shift_sales_partition(db, shift.id)
    result = reconcile_shift_cash(
        shift.starting_cash,
        sales,
        payload.actual_cash,
        [expense.amount for expense in payload.expenses],
    )

    shift.cash_sales = sales.cash
    shift.gcash_sales = sales.gcash
    shift.other_sales = sales.other
    shift.total_sales = sales.total
    shift.transaction_count = sales.count
    shift.expected_cash = result.expected_cash
    shift.total_expenses = result.total_expenses
    shift.actual_cash = payload.actual_cash
    shift.variance = result.variance
    shift.balance_status = result.balance_status.value
    shift.notes = payload.notes
    shift.status = ShiftStatus.COMPLETED.value
    shift.end_time = now_utc()

    await db.commit()
    shift_read = ShiftRead.model_validate(shift)

    logger.info(
        "shift.ended",
        shift_id=str(shift.id),
        staff_id=str(shift.staff_id),
        expected_cash=str(result.expected_cash),
        adjusted_expected=str(result.adjusted_expected),
        actual_cash=str(payload.actual_cash),
        variance=str(result.variance),
        balance_status=result.balance_status.value,
    )

    purchases: list[PendingPurchaseRead] = []
    failed: list[str] = []
    for expense in payload.expenses:
        purchase = PendingPurchase(
            shift_id=shift_read.id,
            date_key=shift_read.date_key,
            description=expense.description,
            amount=expense.amount,
            staff_id=shift_read.staff_id,
            staff_name=shift_read.staff_name,
            status=PurchaseStatus.PENDING_APPROVAL.value,
        )
        db.add(purchase)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            failed.append(expense.description)
            logger.error(
                "shift.purchase_write_failed",
                shift_id=str(shift_read.id),
                description=expense.description,
                amount=str(expense.amount),
                error=str(e),
            )
            continue
        purchases.append(PendingPurchaseRead.model_validate(purchase))

    if request.session.get("shift_id") == str(shift_read.id):
        request.session.pop("shift_id", None)
    invalidate_reports("shift_ended")

    return ShiftEndResult(shift=shift_read, purchases=purchases, failed_purchases=failed)


@router.patch("/{shift_id}", response_model=ShiftRead)
async def edit_shift(
    shift_id: UUID,
    patch: ShiftPatch,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Admin correction. A completed shift's variance is recomputed."""
    shift = await get_shift_or_404(db, shift_id)

    fields = ("starting_cash", "actual_cash", "notes", "expected_cash", "variance", "balance_status")
    old_values = {field: getattr(shift, field) for field in fields}

    if patch.starting_cash is not None:
        shift.starting_cash = patch.starting_cash
    if patch.actual_cash is not None:
        if shift.is_active:
            raise InvalidStateError("Actual cash can only be set on a completed shift")
        shift.actual_cash = patch.actual_cash
    if patch.notes is not None:
        shift.notes = patch.notes

    if not shift.is_active and shift.actual_cash is not None:
        sales = SalesPartition(
            cash=shift.cash_sales,
            gcash=shift.gcash_sales,
            other=shift.other_sales,
            count=shift.transaction_count,
        )
        result = reconcile_shift_cash(shift.starting_cash, sales, shift.actual_cash, [shift.total_expenses])
        shift.expected_cash = result.expected_cash
        shift.variance = result.variance
        shift.balance_status = result.balance_status.value

    new_values = {field: getattr(shift, field) for field in fields}
    if old_values == new_values:
        return shift

    shift.last_modified_at = now_utc()
    shift.last_modified_by = current_staff.name
    await log_change(
        db,
        entity_type="SHIFT",
        entity_id=shift.id,
        changed_by=current_staff.name,
        action="EDIT",
        old_values=old_values,
        new_values=new_values,
        reason=patch.reason,
    )
    await db.flush()
    await db.refresh(shift)
    invalidate_reports("shift_edited")

    logger.info("shift.edited", shift_id=str(shift.id), changed_by=current_staff.name)
    return shift


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(
    shift_id: UUID,
    reason: str | None = None,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete. Sales keep their shift back-reference."""
    shift = await get_shift_or_404(db, shift_id)

    now = now_utc()
    shift.is_deleted = True
    shift.deleted_at = now
    shift.deleted_by = current_staff.name
    shift.last_modified_at = now
    shift.last_modified_by = current_staff.name

    await log_change(
        db,
        entity_type="SHIFT",
        entity_id=shift.id,
        changed_by=current_staff.name,
        action="DELETE",
        old_values={"is_deleted": False},
        new_values={"is_deleted": True},
        reason=reason,
    )
    invalidate_reports("shift_deleted")

    logger.info("shift.deleted", shift_id=str(shift.id), deleted_by=current_staff.name)
