"""Rate-limited dispatch of serialized documents.

Components:
- PendingQueue: thread-safe FIFO of work items
- ReleaseScheduler: fixed-rate tick releasing up to ``limit`` items
- DeliveryExecutor: one contained delivery per released item
- Dispatcher: submit/shutdown facade with drain of undelivered work
- HttpTransport: httpx-based delivery to the configured endpoint
"""

from .dispatcher import Dispatcher, DispatcherState
from .executor import DeliveryExecutor
from .queue import PendingQueue, WorkItem
from .scheduler import ReleaseScheduler
from .transport import HttpTransport, Transport

__all__ = [
    "DeliveryExecutor",
    "Dispatcher",
    "DispatcherState",
    "HttpTransport",
    "PendingQueue",
    "ReleaseScheduler",
    "Transport",
    "WorkItem",
]
