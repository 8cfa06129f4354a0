# File: src/breadpos/core/concurrency.py
"""Row locking and retry helpers for the few writes that contend."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import Select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from breadpos.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(stmt: Select) -> Select:
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; PostgreSQL honors it.
    """
    return stmt.with_for_update()


async def run_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    backoff_base: float = 0.1,
    operation: str = "db_operation",
) -> T:
    """
    Await ``func`` and retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock timeouts) and StaleDataError
    with exponential backoff. ``func`` must open its own transaction so each
    attempt starts clean. The last error is re-raised.
    """
    for attempt in range(attempts):
        try:
            return await func()
        except RETRYABLE_ERRORS as exc:
            if attempt >= attempts - 1:
                logger.warning(
                    "concurrency.retries_exhausted",
                    operation=operation,
                    attempts=attempts,
                    error=type(exc).__name__,
                )
                raise
            delay = backoff_base * (2**attempt)
            logger.info(
                "concurrency.retry",
                operation=operation,
                attempt=attempt + 1,
                delay_seconds=delay,
                error=type(exc).__name__,
            )
            await asyncio.sleep(delay)
    raise RuntimeError("run_with_retry called with attempts < 1")
