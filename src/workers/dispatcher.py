"""
Notification Dispatcher
=======================

A bounded ``asyncio.Queue`` with exactly one consuming worker task.

Lifecycle
---------
* ``start()``    -- spawn the worker (called from the app lifespan).
* ``enqueue()``  -- many producers; never waits.  A message that finds
  the queue full is dropped and counted, and ``DispatcherClosed`` is
  raised once shutdown has begun.
* ``shutdown()`` -- close the queue, let the worker drain everything
  already queued, and wait for it to exit.

Ordering
--------
One consumer means messages are delivered strictly in enqueue order.
Within a message, users are notified one after another; a failed
delivery is logged and counted, never retried, and never stops the
worker.

Message states: QUEUED -> DELIVERING -> DELIVERED, or QUEUED -> DROPPED
when the queue is full or a message lands behind the stop marker.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from src.domain.entities import NotificationMessage
from src.domain.enums import NotificationStatus
from src.domain.errors import DispatcherClosed
from src.domain.ports import Notifier

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class _Stop:
    """Queue marker telling the worker to exit."""


_STOP = _Stop()


class NotificationDispatcher:
    def __init__(self, notifier: Notifier, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.notifier = notifier
        self.capacity = capacity
        self._queue: asyncio.Queue[Union[NotificationMessage, _Stop]] = (
            asyncio.Queue(maxsize=capacity)
        )
        self._task: Optional[asyncio.Task] = None
        self._closed = False

        self.delivered = 0  # messages fully processed
        self.failed = 0  # individual per-user delivery attempts that raised
        self.dropped = 0  # messages never handed to the worker

    # ── Public API ────────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def depth(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._closed:
            raise DispatcherClosed("Dispatcher has been shut down")
        if self._task is not None:
            raise RuntimeError("Dispatcher already started")
        self._task = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("Notification dispatcher started (capacity=%d)", self.capacity)

    async def enqueue(self, message: NotificationMessage) -> bool:
        """Queue *message* without waiting; False when the queue is full."""
        if self._closed:
            raise DispatcherClosed(
                f"Dispatcher closed; notification for tiger {message.tiger_id} refused"
            )
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            message.transition_to(NotificationStatus.DROPPED)
            self.dropped += 1
            logger.warning(
                "Dropped notification for users %s about tiger %d (queue full, capacity=%d)",
                list(message.user_ids), message.tiger_id, self.capacity,
            )
            return False
        logger.info(
            "Queued notification for users %s about tiger %d",
            list(message.user_ids), message.tiger_id,
        )
        return True

    async def shutdown(self) -> None:
        """Stop accepting messages, drain the queue, wait for the worker."""
        if self._closed:
            if self._task is not None:
                await asyncio.shield(self._task)
            return
        self._closed = True
        if self._task is not None:
            await self._queue.put(_STOP)
            await self._task
        self._drop_remaining()
        logger.info(
            "Notification dispatcher stopped (delivered=%d failed=%d dropped=%d)",
            self.delivered, self.failed, self.dropped,
        )

    def stats(self) -> dict:
        return {
            "capacity": self.capacity,
            "depth": self.depth(),
            "delivered": self.delivered,
            "failed": self.failed,
            "dropped": self.dropped,
            "running": self.running,
            "closed": self._closed,
        }

    # ── Internals ─────────────────────────────────────────────────────

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if isinstance(item, _Stop):
                    logger.info("Notification queue closed, stopping worker")
                    return
                await self._deliver(item)
            except Exception:
                logger.exception("Unhandled error delivering notification")
            finally:
                self._queue.task_done()

    async def _deliver(self, message: NotificationMessage) -> None:
        message.transition_to(NotificationStatus.DELIVERING)
        logger.info(
            "Processing notification for users %s about tiger %d",
            list(message.user_ids), message.tiger_id,
        )
        for user_id in message.user_ids:
            try:
                await self.notifier.notify(user_id, message.tiger_id)
            except Exception:
                self.failed += 1
                logger.exception(
                    "Delivery to user %d about tiger %d failed",
                    user_id, message.tiger_id,
                )
        message.transition_to(NotificationStatus.DELIVERED)
        self.delivered += 1

    def _drop_remaining(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()
            if isinstance(item, _Stop):
                continue
            item.transition_to(NotificationStatus.DROPPED)
            self.dropped += 1
            logger.warning(
                "Dropped notification for users %s about tiger %d (dispatcher closed)",
                list(item.user_ids), item.tiger_id,
            )
