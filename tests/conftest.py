"""Pytest configuration and shared fixtures.

Usage Guide:
- For dispatcher tests: use the fake transports from tests.fixtures
- For documents: use make_document / documents fixtures (doc_id "doc-N")
"""

from collections.abc import Callable
from datetime import date

import pytest

from document_dispatcher.codec import JsonCodec
from document_dispatcher.config import DispatchConfig, get_settings
from document_dispatcher.schemas import Document, Product

# -----------------------------------------------------------------------------
# Timing Constants
#
# Short windows keep the suite fast; the scheduler is fixed-rate so the
# absolute window length does not change what is being tested.
# -----------------------------------------------------------------------------
WINDOW = 0.2  # seconds per release window
HALF_WINDOW = WINDOW / 2
TOLERANCE = 0.05  # slack for event loop scheduling


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Make sure every test sees fresh settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Document Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_document() -> Callable[[int], Document]:
    """Factory for distinct documents: doc_id "doc-N"."""

    def _make(n: int) -> Document:
        return Document(
            doc_id=f"doc-{n}",
            owner_inn=f"77{n:08d}",
            reg_number=f"REG-{n}",
            reg_date=date(2024, 1, 10 + n % 20),
            products=[Product(uit_code=f"UIT-{n}", tnved_code="6401100000")],
        )

    return _make


@pytest.fixture
def documents(make_document) -> list[Document]:
    """Five distinct documents, doc-1 .. doc-5."""
    return [make_document(n) for n in range(1, 6)]


@pytest.fixture
def codec() -> JsonCodec[Document]:
    """JSON codec for Document."""
    return JsonCodec(Document)


@pytest.fixture
def dispatch_config() -> DispatchConfig:
    """limit=2 per WINDOW."""
    return DispatchConfig(limit=2, window_seconds=WINDOW)
