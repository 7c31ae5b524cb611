"""Rate-limited document dispatcher.

Ties the pending queue, release scheduler and delivery executor together
behind a submit/shutdown API.

Lifecycle: CREATED -> RUNNING (start) -> DRAINING -> STOPPED (shutdown).
Shutdown stops the scheduler and hands every still-queued document back to
the caller. Deliveries already released keep running in the background;
use ``wait_in_flight`` to wait for them.
"""

from __future__ import annotations

import logging
import threading
from enum import IntEnum
from typing import Any, Generic, Self, TypeVar

from document_dispatcher.codec import Codec
from document_dispatcher.config import DispatchConfig, get_settings
from document_dispatcher.exceptions import DispatcherStateError, SerializationError

from .executor import DeliveryExecutor
from .queue import CompletionHandler, ErrorHandler, PendingQueue, WorkItem
from .scheduler import ReleaseScheduler
from .transport import Transport

logger = logging.getLogger(__name__)

D = TypeVar("D")


class DispatcherState(IntEnum):
    """Lifecycle state of a dispatcher."""

    CREATED = 1
    RUNNING = 2
    DRAINING = 3
    STOPPED = 4


class Dispatcher(Generic[D]):
    """Delivers documents to one endpoint, at most ``limit`` per ``window``.

    Construction does not start releasing. The release scheduler is an
    asyncio task and needs a running event loop, so a new dispatcher stays
    CREATED until ``await start()`` (or ``async with``). Documents submitted
    before that are queued and go out on the first tick.

    Usage:
        async with HttpTransport() as transport:
            dispatcher = Dispatcher(transport, JsonCodec(Document))
            await dispatcher.start()

            dispatcher.submit(Document(doc_id="1"), on_complete=print)

            undelivered = await dispatcher.shutdown()

    Or as an async context manager (shutdown on exit, drained documents
    discarded with a warning):
        async with Dispatcher(transport, codec) as dispatcher:
            dispatcher.submit(document)
    """

    def __init__(
        self,
        transport: Transport,
        codec: Codec[D],
        config: DispatchConfig | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            transport: Transport delivering each payload to the target
            codec: Codec turning documents into payloads and back
            config: Optional release limit/window (uses settings if not provided)
        """
        self._codec = codec
        self._config = config or get_settings().dispatch

        self._queue = PendingQueue()
        self._executor = DeliveryExecutor(transport)
        self._scheduler = ReleaseScheduler(self._queue, self._executor, self._config)

        # Guards state transitions against concurrent submitters
        self._state_lock = threading.Lock()
        self._state = DispatcherState.CREATED
        self._total_submitted = 0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def start(self) -> None:
        """Start the release scheduler; the first tick runs immediately.

        Calling start() on a running dispatcher is a no-op.

        Raises:
            DispatcherStateError: If the dispatcher was already shut down
        """
        with self._state_lock:
            if self._state == DispatcherState.RUNNING:
                return
            if self._state != DispatcherState.CREATED:
                raise DispatcherStateError(
                    f"Cannot start a dispatcher in state {self._state.name}"
                )
            self._state = DispatcherState.RUNNING

        await self._scheduler.start()
        logger.info(
            "Dispatcher running (limit=%d per %.3fs, %d queued)",
            self._config.limit,
            self._config.window_seconds,
            len(self._queue),
        )

    async def shutdown(self) -> list[D]:
        """Stop releasing and return every document still queued.

        Deliveries already released are neither awaited nor cancelled.
        A second call returns an empty list.

        Returns:
            Undelivered documents in submission order

        Note:
            A payload that cannot be decoded is logged with its sequence
            number and left out. The other documents are still returned.
        """
        with self._state_lock:
            if self._state in (DispatcherState.DRAINING, DispatcherState.STOPPED):
                return []
            self._state = DispatcherState.DRAINING

        await self._scheduler.stop()

        with self._state_lock:
            items = self._queue.drain()
            self._state = DispatcherState.STOPPED

        documents = self._decode_drained(items)
        logger.info(
            "Dispatcher stopped (%d returned undelivered, %d still in flight)",
            len(documents),
            self._scheduler.in_flight,
        )
        return documents

    async def wait_in_flight(self, timeout: float | None = None) -> bool:
        """Wait for released deliveries to finish.

        Args:
            timeout: Maximum seconds to wait (None = no limit)

        Returns:
            True if no delivery is left in flight
        """
        return await self._scheduler.wait_in_flight(timeout)

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        undelivered = await self.shutdown()
        if undelivered:
            logger.warning(
                "Discarding %d undelivered document(s) on context exit",
                len(undelivered),
            )

    def _decode_drained(self, items: list[WorkItem]) -> list[D]:
        documents: list[D] = []
        for item in items:
            try:
                documents.append(self._codec.decode(item.payload))
            except SerializationError as e:
                logger.error("Drained item #%d could not be decoded: %s", item.sequence, e)
        return documents

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------
    def submit(
        self,
        document: D,
        on_complete: CompletionHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        """Serialize a document and queue it for delivery.

        Never waits for the rate limit. Safe to call from any thread.

        Args:
            document: Document to deliver
            on_complete: Called once with the response after a successful delivery
            on_error: Called once with a DeliveryError if the delivery fails

        Raises:
            SerializationError: If the document cannot be serialized (nothing queued)
            DispatcherStateError: If the dispatcher is shutting down or stopped
        """
        payload = self._codec.encode(document)

        with self._state_lock:
            if self._state in (DispatcherState.DRAINING, DispatcherState.STOPPED):
                raise DispatcherStateError(
                    f"Cannot submit to a dispatcher in state {self._state.name}"
                )
            item = self._queue.put(payload, on_complete, on_error)
            self._total_submitted += 1

        logger.debug(
            "Queued #%d (%d bytes, queue_size=%d)",
            item.sequence,
            len(payload),
            len(self._queue),
        )

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------
    @property
    def state(self) -> DispatcherState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the scheduler is releasing items."""
        return self._state == DispatcherState.RUNNING

    @property
    def config(self) -> DispatchConfig:
        """Release limit and window."""
        return self._config

    @property
    def queue_size(self) -> int:
        """Number of items waiting for release."""
        return len(self._queue)

    @property
    def in_flight(self) -> int:
        """Number of released deliveries not yet finished."""
        return self._scheduler.in_flight

    def get_stats(self) -> dict[str, Any]:
        """Get dispatcher statistics.

        Returns:
            Dict with state, queue_size, in_flight, and running totals
        """
        return {
            "state": self._state.name,
            "queue_size": len(self._queue),
            "in_flight": self._scheduler.in_flight,
            "ticks": self._scheduler.ticks,
            "total_submitted": self._total_submitted,
            "total_released": self._scheduler.total_released,
            "total_completed": self._executor.total_completed,
            "total_failed": self._executor.total_failed,
        }
