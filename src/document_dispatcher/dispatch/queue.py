"""Pending queue of serialized work items.

A single-ended FIFO: submitters append at the tail, the release scheduler
and the drain remove from the head. Every operation holds one lock, so an
item is handed to exactly one consumer.
"""

from __future__ import annotations

import itertools
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from document_dispatcher.exceptions import DeliveryError

CompletionHandler = Callable[[Any], None]
ErrorHandler = Callable[["DeliveryError"], None]


@dataclass(frozen=True, slots=True)
class WorkItem:
    """One queued delivery: serialized payload plus its handlers.

    ``sequence`` is assigned per dispatcher and only used to correlate logs.
    """

    sequence: int
    payload: bytes
    on_complete: CompletionHandler | None = None
    on_error: ErrorHandler | None = None


class PendingQueue:
    """Thread-safe FIFO of work items not yet released."""

    def __init__(self) -> None:
        self._items: deque[WorkItem] = deque()
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)

    def put(
        self,
        payload: bytes,
        on_complete: CompletionHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> WorkItem:
        """Wrap a payload in a new work item and append it at the tail.

        Returns:
            The queued item, numbered in submission order
        """
        with self._lock:
            item = WorkItem(next(self._sequence), payload, on_complete, on_error)
            self._items.append(item)
        return item

    def pop_many(self, limit: int) -> list[WorkItem]:
        """Remove up to ``limit`` items from the head, oldest first.

        Never waits: returns fewer items (possibly none) when the queue
        holds fewer than ``limit``.
        """
        with self._lock:
            count = min(limit, len(self._items))
            return [self._items.popleft() for _ in range(count)]

    def drain(self) -> list[WorkItem]:
        """Remove and return every remaining item, oldest first."""
        with self._lock:
            items = list(self._items)
            self._items.clear()
            return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
