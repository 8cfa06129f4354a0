# File: src/breadpos/api/auth_helpers.py
"""Role-based authorization helpers."""

from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, status

from breadpos.api.auth import get_current_staff
from breadpos.core.logging import get_logger
from breadpos.models import Staff
from breadpos.models.enums import StaffRole

logger = get_logger(__name__)


def require_role(minimum: StaffRole) -> Callable[..., Awaitable[Staff]]:
    """Build a dependency that admits staff ranked at or above ``minimum``."""

    async def dependency(current_staff: Staff = Depends(get_current_staff)) -> Staff:
        if not current_staff.has_role(minimum):
            logger.warning(
                "auth.permission_denied",
                staff_id=str(current_staff.id),
                required_role=minimum.value,
                staff_role=current_staff.role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have permission to access this resource",
            )
        return current_staff

    return dependency


require_baker = require_role(StaffRole.BAKER)
require_manager = require_role(StaffRole.MANAGER)
require_admin = require_role(StaffRole.ADMIN)
