"""Test fixtures for the document dispatcher."""

from .transports import (
    BlockingTransport,
    Delivery,
    FakeResponse,
    HandlerLog,
    RecordingTransport,
)

__all__ = [
    "BlockingTransport",
    "Delivery",
    "FakeResponse",
    "HandlerLog",
    "RecordingTransport",
]
