"""Periodic release scheduler.

Once per window the scheduler pops up to ``limit`` items from the pending
queue and starts one delivery task per item. It never waits for those
deliveries: the limit bounds how many deliveries are *started* per window,
not how many are in flight at once.

Ticks are fixed-rate. Tick ``n`` is due at ``start + n * window``; the
first tick runs as soon as the scheduler starts. A tick that runs late
skips the slots it missed instead of bursting to catch up, so no
window-aligned bucket ever sees more than one tick.
"""

from __future__ import annotations

import asyncio
import logging
import math

from document_dispatcher.config import DispatchConfig

from .executor import DeliveryExecutor
from .queue import PendingQueue

logger = logging.getLogger(__name__)


class ReleaseScheduler:
    """Releases queued work items at a bounded rate.

    Usage:
        scheduler = ReleaseScheduler(queue, executor, DispatchConfig(limit=2))
        await scheduler.start()
        ...
        await scheduler.stop()  # in-flight deliveries keep running
    """

    def __init__(
        self,
        queue: PendingQueue,
        executor: DeliveryExecutor,
        config: DispatchConfig,
    ) -> None:
        """Initialize the release scheduler.

        Args:
            queue: Queue to release items from
            executor: Executor that delivers each released item
            config: Release limit and window
        """
        self._queue = queue
        self._executor = executor
        self._config = config

        # State
        self._running = False
        self._tick_task: asyncio.Task[None] | None = None
        self._active_tasks: set[asyncio.Task[None]] = set()  # Prevent task GC

        # Statistics
        self._ticks = 0
        self._total_released = 0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def start(self) -> None:
        """Start ticking. The first tick runs on the next loop iteration."""
        if self._running:
            return

        self._running = True
        self._tick_task = asyncio.create_task(self._tick_loop(), name="release-scheduler")
        logger.info(
            "Release scheduler started (limit=%d, window=%.3fs)",
            self._config.limit,
            self._config.window_seconds,
        )

    async def stop(self) -> None:
        """Stop ticking. Deliveries already started are left running.

        Once this returns no further items are popped from the queue.
        """
        self._running = False

        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None

        logger.info(
            "Release scheduler stopped (ticks=%d, released=%d, in_flight=%d)",
            self._ticks,
            self._total_released,
            len(self._active_tasks),
        )

    @property
    def is_running(self) -> bool:
        """Whether the scheduler is ticking."""
        return self._running

    # -------------------------------------------------------------------------
    # Ticking
    # -------------------------------------------------------------------------
    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        window = self._config.window_seconds
        started = loop.time()
        slot = 0

        while True:
            self.tick()

            elapsed = loop.time() - started
            slot = max(slot + 1, math.floor(elapsed / window) + 1)
            await asyncio.sleep(started + slot * window - loop.time())

    def tick(self) -> int:
        """Release up to ``limit`` items, one delivery task each.

        Returns:
            Number of items released by this tick
        """
        items = self._queue.pop_many(self._config.limit)
        self._ticks += 1

        for item in items:
            task = asyncio.create_task(
                self._executor.execute(item),
                name=f"delivery-{item.sequence}",
            )
            self._active_tasks.add(task)
            task.add_done_callback(self._active_tasks.discard)

        self._total_released += len(items)
        if items:
            logger.debug(
                "Tick %d released %d item(s) (#%d..#%d), %d still queued",
                self._ticks,
                len(items),
                items[0].sequence,
                items[-1].sequence,
                len(self._queue),
            )
        return len(items)

    # -------------------------------------------------------------------------
    # In-flight Deliveries
    # -------------------------------------------------------------------------
    @property
    def in_flight(self) -> int:
        """Deliveries started and not yet finished."""
        return len(self._active_tasks)

    async def wait_in_flight(self, timeout: float | None = None) -> bool:
        """Wait for deliveries already started to finish.

        Args:
            timeout: Maximum seconds to wait (None = no limit)

        Returns:
            True if nothing is left in flight
        """
        if not self._active_tasks:
            return True

        _, pending = await asyncio.wait(set(self._active_tasks), timeout=timeout)
        return not pending

    @property
    def ticks(self) -> int:
        """Number of ticks run so far."""
        return self._ticks

    @property
    def total_released(self) -> int:
        """Number of items handed to the executor so far."""
        return self._total_released
