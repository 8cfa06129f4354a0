# File: src/breadpos/core/stock.py
"""Finished-goods stock checks and per-sale deduction."""

import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from breadpos.core.concurrency import lock_for_update, run_with_retry
from breadpos.core.events import StockBroker, StockEvent
from breadpos.core.logging import get_logger
from breadpos.models.enums import MovementType
from breadpos.models.inventory import DailyInventory, StockMovement
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5
NO_RECORD_MESSAGE = "No inventory record"


@dataclass
class StockCheck:
    """Answer to "can this many more units go into the cart?"."""

    allowed: bool
    needed: int
    available: int | None
    warning: str | None = None


def evaluate_can_add(
    record: DailyInventory | None,
    requested_qty: int,
    current_cart_qty: int = 0,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> StockCheck:
    """
    Decide whether ``requested_qty`` more units may be added.

    Untracked products (no record today) are allowed with a warning.
    """
    needed = requested_qty + current_cart_qty

    if record is None:
        return StockCheck(allowed=True, needed=needed, available=None, warning="No stock record for today")

    sellable = record.sellable
    if sellable >= needed:
        warning = f"Only {sellable} left" if sellable <= low_stock_threshold else None
        return StockCheck(allowed=True, needed=needed, available=sellable, warning=warning)

    return StockCheck(
        allowed=False,
        needed=needed,
        available=sellable,
        warning=f"Only {sellable} available (need {needed})",
    )


def stock_status(record: DailyInventory | None, low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> str:
    """Short label shown on the product tile."""
    if record is None:
        return "No stock"
    sellable = record.sellable
    if sellable <= 0:
        return "SOLD OUT"
    if sellable <= low_stock_threshold:
        return f"{sellable} left"
    return f"{sellable} in stock"


async def get_day_record(db: AsyncSession, date_key: str, product_id: uuid.UUID) -> DailyInventory | None:
    stmt = select(DailyInventory).where(
        DailyInventory.date_key == date_key,
        DailyInventory.product_id == product_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_day_records(db: AsyncSession, date_key: str) -> dict[uuid.UUID, DailyInventory]:
    stmt = select(DailyInventory).where(DailyInventory.date_key == date_key)
    result = await db.execute(stmt)
    return {record.product_id: record for record in result.scalars().all()}


@dataclass
class StockLine:
    product_id: uuid.UUID
    quantity: int


@dataclass
class DeductionResult:
    product_id: uuid.UUID
    success: bool
    deducted: int = 0
    sellable: int | None = None
    error: str | None = None
    # Missing record means the product is untracked today, not a fault to retry
    retryable: bool = False


async def _deduct_one(
    session_factory: async_sessionmaker[AsyncSession],
    date_key: str,
    line: StockLine,
    sale_id: uuid.UUID,
    sale_number: str,
    performed_by: str,
) -> tuple[DeductionResult, StockEvent | None]:
    async with session_factory() as session:
        async with session.begin():
            stmt = lock_for_update(
                select(DailyInventory).where(
                    DailyInventory.date_key == date_key,
                    DailyInventory.product_id == line.product_id,
                )
            )
            record = (await session.execute(stmt)).scalar_one_or_none()
            if record is None:
                return DeductionResult(line.product_id, success=False, error=NO_RECORD_MESSAGE), None

            now = now_utc()
            record.sold_qty = (record.sold_qty or 0) + line.quantity
            record.updated_at = now
            sold_out = record.sellable <= 0
            if sold_out and record.sold_out_at is None:
                record.sold_out_at = now

            session.add(
                StockMovement(
                    date_key=date_key,
                    product_id=line.product_id,
                    movement_type=MovementType.SALE.value,
                    quantity=-line.quantity,
                    sold_after=record.sold_qty,
                    sale_id=sale_id,
                    sale_number=sale_number,
                    performed_by=performed_by,
                )
            )
            sellable = record.sellable
            event = StockEvent(
                product_id=str(line.product_id),
                date_key=date_key,
                sellable=sellable,
                sold_qty=record.sold_qty,
                sold_out=sold_out,
            )

    return (
        DeductionResult(line.product_id, success=True, deducted=line.quantity, sellable=sellable),
        event,
    )


async def deduct_stock(
    session_factory: async_sessionmaker[AsyncSession],
    date_key: str,
    lines: Iterable[StockLine],
    sale_id: uuid.UUID,
    sale_number: str,
    performed_by: str,
    broker: StockBroker | None = None,
) -> list[DeductionResult]:
    """
    Add each line's quantity to the day's sold count.

    Every product runs in its own locked transaction, so one product's
    failure never blocks the others. Returns one result per product.
    """
    results: list[DeductionResult] = []

    for line in lines:
        try:
            result, event = await run_with_retry(
                lambda line=line: _deduct_one(
                    session_factory, date_key, line, sale_id, sale_number, performed_by
                ),
                operation="stock.deduct",
            )
        except SQLAlchemyError as exc:
            logger.error(
                "stock.deduct_failed",
                sale_number=sale_number,
                product_id=str(line.product_id),
                error=str(exc),
            )
            results.append(
                DeductionResult(line.product_id, success=False, error=str(exc), retryable=True)
            )
            continue

        if result.success:
            logger.info(
                "stock.deducted",
                sale_number=sale_number,
                product_id=str(line.product_id),
                quantity=line.quantity,
                sellable=result.sellable,
            )
            if broker is not None and event is not None:
                broker.publish(event)
        else:
            logger.warning(
                "stock.no_record",
                sale_number=sale_number,
                product_id=str(line.product_id),
            )
        results.append(result)

    return results
