"""Per-item delivery execution.

Each released work item is delivered by its own ``execute`` call running in
its own asyncio task. A failure is contained to that item: it is classified,
logged and reported to the item's error handler, never raised into the
release scheduler.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from document_dispatcher.exceptions import DeliveryCancelledError, DeliveryError
from document_dispatcher.logging import bind_item

from .queue import WorkItem
from .transport import Transport

logger = logging.getLogger(__name__)


class DeliveryExecutor:
    """Delivers single work items through a transport.

    Async transports are awaited on the event loop; blocking transports are
    pushed to a worker thread so a slow delivery never stalls the loop.

    Usage:
        executor = DeliveryExecutor(transport)
        task = asyncio.create_task(executor.execute(item))
    """

    def __init__(self, transport: Transport) -> None:
        """Initialize the executor.

        Args:
            transport: Transport used for every delivery
        """
        self._transport = transport
        self._blocking = not inspect.iscoroutinefunction(transport.deliver)

        # Statistics
        self._total_completed = 0
        self._total_failed = 0

    @property
    def total_completed(self) -> int:
        """Deliveries that received a response."""
        return self._total_completed

    @property
    def total_failed(self) -> int:
        """Deliveries that ended in a DeliveryError (including cancellation)."""
        return self._total_failed

    async def execute(self, item: WorkItem) -> None:
        """Deliver one item and invoke its completion handler on success.

        The completion handler runs at most once, and only after a response
        was received. Transport failures go to ``on_error`` instead. Every
        record logged meanwhile is tagged with the item's sequence number.

        Raises:
            asyncio.CancelledError: Re-raised after the cancellation has
                been reported to the item's error handler
        """
        with bind_item(item.sequence):
            await self._execute(item)

    async def _execute(self, item: WorkItem) -> None:
        logger.debug("Sending %d bytes", len(item.payload))

        try:
            response = await self._send(item.payload)
        except asyncio.CancelledError as e:
            self._total_failed += 1
            error = DeliveryCancelledError(
                f"Delivery #{item.sequence} cancelled before a response arrived",
                sequence=item.sequence,
            )
            error.__cause__ = e
            logger.warning("%s", error)
            await self._report(item.on_error, error, "error")
            raise
        except Exception as e:
            self._total_failed += 1
            error = DeliveryError(
                f"Delivery #{item.sequence} failed: {type(e).__name__}: {e}",
                sequence=item.sequence,
            )
            error.__cause__ = e
            logger.warning("%s", error)
            await self._report(item.on_error, error, "error")
            return

        self._total_completed += 1
        logger.debug("Response received")
        await self._report(item.on_complete, response, "completion")

    async def _send(self, payload: bytes) -> Any:
        if self._blocking:
            return await asyncio.to_thread(self._transport.deliver, payload)
        return await self._transport.deliver(payload)

    async def _report(
        self,
        handler: Callable[[Any], Any] | None,
        value: Any,
        kind: str,
    ) -> None:
        """Invoke a caller handler, containing anything it raises.

        Handlers may be plain functions or return an awaitable.
        """
        if handler is None:
            return

        logger.debug("Invoking %s handler", kind)
        try:
            result = handler(value)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("The %s handler raised", kind)
