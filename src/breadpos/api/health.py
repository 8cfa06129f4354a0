"""Liveness endpoint for the container healthcheck and the register's status light.

Always answers 200; a failing database shows up as ``"status": "degraded"``
so the register can keep showing cached stock while Postgres comes back.
"""

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.core.db import get_db
from breadpos.core.logging import get_logger
from breadpos.utils.datetime import today_key

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

_started_at: datetime | None = None


def set_app_start_time(start_time: datetime) -> None:
    global _started_at
    _started_at = start_time


def get_uptime_seconds() -> int:
    return int((datetime.now() - _started_at).total_seconds()) if _started_at else 0


async def check_database(db: AsyncSession) -> dict[str, Any]:
    began = time.perf_counter()
    result: dict[str, Any] = {"status": "ok"}
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("health.database_down", error=type(e).__name__)
        result = {"status": "down", "error": type(e).__name__}
    result["response_time_ms"] = int((time.perf_counter() - began) * 1000)
    return result


@router.get("/health", summary="Health check")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    database = await check_database(db)
    broker = getattr(request.app.state, "stock_broker", None)
    return {
        "status": "ok" if database["status"] == "ok" else "degraded",
        "business_day": today_key(),
        "uptime_seconds": get_uptime_seconds(),
        "checks": {"database": database},
        "stock_stream_listeners": broker.subscriber_count if broker else 0,
    }
