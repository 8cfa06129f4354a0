"""PIN login endpoints and the current-staff dependency."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from breadpos.core.db import get_db
from breadpos.core.logging import get_logger
from breadpos.core.security import verify_pin
from breadpos.models import Shift, Staff
from breadpos.models.enums import ShiftStatus, StaffRole
from breadpos.models.staff_schemas import LoginRequest, SessionInfo, StaffRead
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# Inactivity timeout by role (seconds). Register roles lock quickly.
ROLE_TIMEOUTS = {
    StaffRole.STAFF: 30 * 60,
    StaffRole.BAKER: 30 * 60,
    StaffRole.MANAGER: 2 * 60 * 60,
    StaffRole.OWNER: 2 * 60 * 60,
    StaffRole.ADMIN: 2 * 60 * 60,
}


def _session_expired(request: Request, role: str | None) -> bool:
    """Check and refresh the inactivity clock stored in the cookie session."""
    try:
        timeout = ROLE_TIMEOUTS[StaffRole(role)]
    except (ValueError, KeyError):
        return False

    now_naive = now_utc()
    last_activity_raw = request.session.get("last_activity")
    try:
        last_activity = (
            datetime.fromisoformat(last_activity_raw).replace(tzinfo=timezone.utc)
            if last_activity_raw
            else None
        )
    except (ValueError, TypeError):
        last_activity = None

    now = now_naive.replace(tzinfo=timezone.utc)
    if last_activity and (now - last_activity) > timedelta(seconds=timeout):
        logger.info(
            "auth.session_expired",
            staff_id=request.session.get("staff_id"),
            role=role,
            timeout_seconds=timeout,
            time_elapsed_seconds=round((now - last_activity).total_seconds(), 2),
        )
        return True

    request.session["last_activity"] = now_naive.isoformat()
    return False


async def get_current_staff(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Staff:
    """Dependency to get the logged-in staff member from the session."""
    staff_id = request.session.get("staff_id")

    if not staff_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    if _session_expired(request, request.session.get("staff_role")):
        request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
        )

    try:
        staff_uuid = UUID(staff_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid staff session",
        )

    stmt = select(Staff).where((Staff.id == staff_uuid) & (Staff.is_active))
    result = await db.execute(stmt)
    staff = result.scalar_one_or_none()

    if not staff:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Staff not found or inactive",
        )

    return staff


async def find_active_shift(db: AsyncSession, staff_id: UUID) -> Shift | None:
    stmt = select(Shift).where(
        Shift.staff_id == staff_id,
        Shift.status == ShiftStatus.ACTIVE.value,
        ~Shift.is_deleted,
    )
    result = await db.execute(stmt)
    return result.scalars().first()


@router.post("/login", response_model=SessionInfo)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Validate the PIN and start a session. An open shift is resumed."""
    stmt = select(Staff).where(Staff.name == payload.name.strip())
    result = await db.execute(stmt)
    staff = result.scalar_one_or_none()

    if not staff or not verify_pin(payload.pin, staff.hashed_pin):
        logger.warning("auth.login_failed", name=payload.name)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid name or PIN",
        )

    if not staff.is_active:
        logger.warning("auth.login_disabled_account", staff_id=str(staff.id))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled",
        )

    request.session.clear()
    request.session["staff_id"] = str(staff.id)
    request.session["staff_role"] = staff.role
    request.session["staff_name"] = staff.name
    request.session["view_only"] = False
    request.session["last_activity"] = now_utc().isoformat()

    shift = await find_active_shift(db, staff.id)
    if shift is not None:
        request.session["shift_id"] = str(shift.id)

    logger.info(
        "auth.login_success",
        staff_id=str(staff.id),
        role=staff.role,
        resumed_shift=str(shift.id) if shift else None,
    )
    return SessionInfo(
        staff=StaffRead.model_validate(staff),
        shift_id=shift.id if shift else None,
    )


@router.get("/me", response_model=SessionInfo)
async def me(
    request: Request,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    shift = await find_active_shift(db, current_staff.id)
    return SessionInfo(
        staff=StaffRead.model_validate(current_staff),
        shift_id=shift.id if shift else None,
        view_only=bool(request.session.get("view_only")),
    )


@router.post("/logout")
async def logout(request: Request):
    """Clear the session. An open shift stays open until it is ended."""
    staff_id = request.session.get("staff_id")
    if staff_id:
        logger.info("auth.logout", staff_id=staff_id, shift_id=request.session.get("shift_id"))

    request.session.clear()
    return {"status": "logged_out"}
