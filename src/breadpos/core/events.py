# File: src/breadpos/core/events.py
"""In-process publish/subscribe for live stock updates.

Subscriptions are async context managers, so leaving the ``async with``
block always unsubscribes.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import AsyncIterator

from breadpos.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StockEvent:
    product_id: str
    date_key: str
    sellable: int
    sold_qty: int
    sold_out: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class StockBroker:
    """Fan-out of stock changes to any number of listeners."""

    def __init__(self, max_queue_size: int = 100):
        self._max_queue_size = max_queue_size
        self._subscribers: set[asyncio.Queue[StockEvent]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[StockEvent]]:
        queue: asyncio.Queue[StockEvent] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        logger.info("stock_stream.subscribed", subscribers=len(self._subscribers))
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.info("stock_stream.unsubscribed", subscribers=len(self._subscribers))

    def publish(self, event: StockEvent) -> None:
        """Deliver to every listener; a full queue drops the event for that listener only."""
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("stock_stream.dropped", product_id=event.product_id)
