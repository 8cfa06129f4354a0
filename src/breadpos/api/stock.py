# File: src/breadpos/api/stock.py
"""Daily finished-goods stock endpoints and the live stock stream."""

import asyncio
import json
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from breadpos.api.auth import get_current_staff
from breadpos.api.auth_helpers import require_baker
from breadpos.api.settings import get_pos_settings
from breadpos.core.db import get_db
from breadpos.core.errors import NotFoundError
from breadpos.core.events import StockBroker, StockEvent
from breadpos.core.logging import get_logger
from breadpos.core.stock import evaluate_can_add, get_day_record, stock_status
from breadpos.models import DailyInventory, Product, Staff, StockMovement
from breadpos.models.enums import MovementType
from breadpos.models.stock_schemas import (
    StockCheckRequest,
    StockCheckResponse,
    StockRead,
    StockStatus,
    StockUpdate,
)
from breadpos.utils.datetime import date_key as to_date_key
from breadpos.utils.datetime import now_utc, today_key

logger = get_logger(__name__)

router = APIRouter(prefix="/stock", tags=["stock"])

KEEPALIVE_SECONDS = 15


def get_stock_broker(request: Request) -> StockBroker:
    """Dependency for the app-wide broker created with the app."""
    return request.app.state.stock_broker


def _read(record: DailyInventory, threshold: int) -> StockRead:
    data = StockRead.model_validate(record)
    data.status = stock_status(record, threshold)
    return data


@router.get("", response_model=list[StockRead])
async def list_stock(
    date: date | None = None,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """The day's stock records (default today), by category then name."""
    date_key = to_date_key(date) if date else today_key()
    settings = await get_pos_settings(db)
    stmt = (
        select(DailyInventory)
        .where(DailyInventory.date_key == date_key)
        .order_by(DailyInventory.category, DailyInventory.product_name)
    )
    result = await db.execute(stmt)
    return [_read(record, settings.low_stock_threshold) for record in result.scalars().all()]


@router.get("/stream")
async def stock_stream(
    request: Request,
    current_staff: Staff = Depends(get_current_staff),
    broker: StockBroker = Depends(get_stock_broker),
):
    """Server-sent events with each stock change; ends when the client disconnects."""

    async def events():
        async with broker.subscribe() as queue:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: stock\ndata: {json.dumps(event.to_dict())}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")


@router.post("/check", response_model=StockCheckResponse)
async def check_stock(
    payload: StockCheckRequest,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Can ``requested_qty`` more units go into a cart already holding ``current_cart_qty``?"""
    settings = await get_pos_settings(db)
    record = await get_day_record(db, today_key(), payload.product_id)
    check = evaluate_can_add(
        record,
        payload.requested_qty,
        payload.current_cart_qty,
        settings.low_stock_threshold,
    )
    return StockCheckResponse(
        allowed=check.allowed,
        needed=check.needed,
        available=check.available,
        warning=check.warning,
    )


@router.get("/{product_id}", response_model=StockStatus)
async def product_stock(
    product_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    settings = await get_pos_settings(db)
    date_key = today_key()
    record = await get_day_record(db, date_key, product_id)
    return StockStatus(
        product_id=product_id,
        date_key=date_key,
        sellable=record.sellable if record else None,
        status=stock_status(record, settings.low_stock_threshold),
    )


@router.put("/{product_id}", response_model=StockRead)
async def set_stock(
    product_id: UUID,
    payload: StockUpdate,
    current_staff: Staff = Depends(require_baker),
    db: AsyncSession = Depends(get_db),
    broker: StockBroker = Depends(get_stock_broker),
):
    """Record today's carryover and production for a product. Sold counts are untouched."""
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", str(product_id))

    date_key = today_key()
    record = await get_day_record(db, date_key, product_id)
    old_total = 0
    if record is None:
        record = DailyInventory(
            date_key=date_key,
            product_id=product.id,
            product_name=product.name,
            category=product.category,
            sold_qty=0,
        )
        db.add(record)
    else:
        old_total = record.total_available or 0

    now = now_utc()
    record.carryover_qty = payload.carryover_qty
    record.new_production_qty = payload.new_production_qty
    record.total_available = payload.carryover_qty + payload.new_production_qty
    record.reserved_qty = payload.reserved_qty
    record.cancelled_qty = payload.cancelled_qty
    record.updated_at = now
    if record.sellable > 0:
        record.sold_out_at = None
    elif record.sold_out_at is None:
        record.sold_out_at = now

    db.add(
        StockMovement(
            date_key=date_key,
            product_id=product.id,
            movement_type=MovementType.ADJUSTMENT.value,
            quantity=record.total_available - old_total,
            sold_after=record.sold_qty or 0,
            performed_by=current_staff.name,
        )
    )
    settings = await get_pos_settings(db)
    # Listeners must never see a level that was rolled back
    await db.commit()

    broker.publish(
        StockEvent(
            product_id=str(product.id),
            date_key=date_key,
            sellable=record.sellable,
            sold_qty=record.sold_qty or 0,
            sold_out=record.sellable <= 0,
        )
    )
    logger.info(
        "stock.updated",
        product_id=str(product.id),
        total_available=record.total_available,
        sellable=record.sellable,
        updated_by=current_staff.name,
    )
    return _read(record, settings.low_stock_threshold)
