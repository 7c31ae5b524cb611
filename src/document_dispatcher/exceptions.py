"""Dispatcher exceptions."""


class DispatcherError(Exception):
    """Base exception for dispatcher errors."""

    pass


class SerializationError(DispatcherError):
    """Raised when a document cannot be encoded to, or decoded from, bytes."""

    pass


class DeliveryError(DispatcherError):
    """Raised when the transport fails to deliver a single work item.

    Scoped to one item: the scheduler and other deliveries are unaffected.
    The underlying transport exception is available as ``__cause__``.
    """

    def __init__(self, message: str, sequence: int | None = None) -> None:
        super().__init__(message)
        self.sequence = sequence


class DeliveryCancelledError(DeliveryError):
    """Raised when an in-flight delivery is cancelled before a response arrives."""

    pass


class DispatcherStateError(DispatcherError):
    """Raised when the dispatcher is used in a lifecycle state that forbids it."""

    pass
