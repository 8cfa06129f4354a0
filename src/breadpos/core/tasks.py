# File: src/breadpos/core/tasks.py
"""Post-checkout background jobs: stock and ingredient deduction.

Checkout commits the sale first and schedules these. The cashier never waits
on them. A job that still fails after its retries is written to
``deduction_failures`` so an admin can replay it.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from breadpos.core.concurrency import run_with_retry
from breadpos.core.errors import InvalidStateError, NotFoundError
from breadpos.core.events import StockBroker
from breadpos.core.logging import get_logger
from breadpos.core.recipes import MissingMaterialError, apply_ingredient_deduction
from breadpos.core.stock import StockLine, deduct_stock
from breadpos.models.enums import DeductionJob
from breadpos.models.inventory_deduction import DeductionFailure
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

RETRY_ATTEMPTS = 3


@dataclass
class SaleDeductionJob:
    """Everything the jobs need, captured before the request session closes."""

    sale_id: uuid.UUID
    sale_number: str
    date_key: str
    lines: list[tuple[uuid.UUID, int]]
    performed_by: str

    @classmethod
    def from_payload(cls, failure: DeductionFailure, performed_by: str, date_key: str) -> "SaleDeductionJob":
        return cls(
            sale_id=failure.sale_id,
            sale_number=failure.sale_number,
            date_key=date_key,
            lines=[(uuid.UUID(line["product_id"]), int(line["quantity"])) for line in failure.payload],
            performed_by=performed_by,
        )


def _payload(lines: list[tuple[uuid.UUID, int]]) -> list[dict]:
    return [{"product_id": str(product_id), "quantity": quantity} for product_id, quantity in lines]


async def _record_failure(
    session_factory: async_sessionmaker[AsyncSession],
    job: SaleDeductionJob,
    kind: DeductionJob,
    lines: list[tuple[uuid.UUID, int]],
    error: str,
) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(
                DeductionFailure(
                    sale_id=job.sale_id,
                    sale_number=job.sale_number,
                    job=kind.value,
                    payload=[{**line, "date_key": job.date_key} for line in _payload(lines)],
                    error=error,
                    attempts=RETRY_ATTEMPTS,
                )
            )
    logger.error(
        "deduction.dead_lettered",
        sale_number=job.sale_number,
        job=kind.value,
        lines=len(lines),
        error=error,
    )


async def run_stock_job(
    session_factory: async_sessionmaker[AsyncSession],
    job: SaleDeductionJob,
    broker: StockBroker | None = None,
) -> list[tuple[uuid.UUID, int]]:
    """Deduct finished-goods stock. Returns the lines that still failed."""
    results = await deduct_stock(
        session_factory,
        job.date_key,
        [StockLine(product_id, quantity) for product_id, quantity in job.lines],
        job.sale_id,
        job.sale_number,
        job.performed_by,
        broker=broker,
    )
    quantities = dict(job.lines)
    return [(r.product_id, quantities[r.product_id]) for r in results if not r.success and r.retryable]


async def run_ingredient_job(
    session_factory: async_sessionmaker[AsyncSession],
    job: SaleDeductionJob,
) -> None:
    await run_with_retry(
        lambda: apply_ingredient_deduction(
            session_factory, job.sale_id, job.sale_number, job.lines, job.performed_by
        ),
        attempts=RETRY_ATTEMPTS,
        operation="ingredients.deduct",
    )


async def run_sale_deductions(
    session_factory: async_sessionmaker[AsyncSession],
    job: SaleDeductionJob,
    broker: StockBroker | None = None,
) -> None:
    """Background entry point scheduled by checkout.

    Nothing may escape: a job that cannot finish ends up in
    ``deduction_failures`` rather than dying silently in the task runner.
    """
    failed_lines = await run_stock_job(session_factory, job, broker)
    if failed_lines:
        await _record_failure(
            session_factory, job, DeductionJob.STOCK, failed_lines, "Stock deduction failed after retries"
        )

    try:
        await run_ingredient_job(session_factory, job)
    except (MissingMaterialError, SQLAlchemyError) as exc:
        await _record_failure(session_factory, job, DeductionJob.INGREDIENTS, job.lines, str(exc))
    except Exception as exc:
        logger.exception("deduction.unexpected_error", sale_number=job.sale_number)
        await _record_failure(session_factory, job, DeductionJob.INGREDIENTS, job.lines, repr(exc))


async def retry_failure(
    session_factory: async_sessionmaker[AsyncSession],
    failure_id: uuid.UUID,
    performed_by: str,
    broker: StockBroker | None = None,
) -> DeductionFailure:
    """Replay a dead-lettered job; marks it resolved on success.

    A stock replay that only partly succeeds keeps just the lines that still
    failed, so the next replay never deducts a product twice.
    """
    async with session_factory() as session:
        failure = await session.get(DeductionFailure, failure_id)
        if failure is None:
            raise NotFoundError("DeductionFailure", str(failure_id))
        if failure.resolved_at is not None:
            raise InvalidStateError("Deduction failure already resolved")

    date_key = failure.payload[0]["date_key"] if failure.payload else ""
    job = SaleDeductionJob.from_payload(failure, performed_by, date_key)

    error: str | None = None
    remaining: list[dict] | None = None
    if failure.job == DeductionJob.STOCK.value:
        still_failed = await run_stock_job(session_factory, job, broker)
        if still_failed:
            error = "Stock deduction failed after retries"
            remaining = [{**line, "date_key": date_key} for line in _payload(still_failed)]
    else:
        try:
            await run_ingredient_job(session_factory, job)
        except (MissingMaterialError, SQLAlchemyError) as exc:
            error = str(exc)

    async with session_factory() as session:
        async with session.begin():
            failure = await session.get(DeductionFailure, failure_id)
            failure.attempts += RETRY_ATTEMPTS
            if error is None:
                failure.resolved_at = now_utc()
            else:
                failure.error = error
            if remaining is not None:
                failure.payload = remaining

    logger.info(
        "deduction.retried",
        failure_id=str(failure_id),
        job=failure.job,
        resolved=error is None,
        remaining_lines=len(remaining) if remaining is not None else 0,
    )
    return failure


async def list_open_failures(db: AsyncSession) -> list[DeductionFailure]:
    result = await db.execute(
        select(DeductionFailure)
        .where(DeductionFailure.resolved_at.is_(None))
        .order_by(DeductionFailure.created_at.desc())
    )
    return list(result.scalars().all())
