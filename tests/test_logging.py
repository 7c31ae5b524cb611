"""Tests for logging configuration."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from loguru import logger

from document_dispatcher.config import LoggingConfig
from document_dispatcher.dispatch.executor import DeliveryExecutor
from document_dispatcher.dispatch.queue import WorkItem
from document_dispatcher.logging import (
    bind_item,
    bind_run,
    get_logger,
    resolve_level,
    setup_logging,
)
from tests.fixtures import RecordingTransport

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _remove_sinks() -> Generator[None, None, None]:
    """Start and finish every test without loguru sinks."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def captured() -> Generator[list[str], None, None]:
    """Messages rendered as "{extra} | {message}" after DEBUG setup."""
    messages: list[str] = []
    setup_logging(level="DEBUG")
    handler_id = logger.add(
        lambda msg: messages.append(str(msg)),
        level="DEBUG",
        format="{extra} | {message}",
    )
    yield messages
    logger.remove(handler_id)


class TestResolveLevel:
    """Tests for the --verbose/--quiet overrides."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, "ERROR"),
            (True, False, "DEBUG"),
            (False, True, "WARNING"),
            (True, True, "DEBUG"),
        ],
    )
    def test_overrides(self, verbose: bool, quiet: bool, expected: str) -> None:
        assert resolve_level("ERROR", verbose=verbose, quiet=quiet) == expected


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_verbose_console_shows_debug(self) -> None:
        """verbose=True lets DEBUG records through."""
        messages: list[str] = []
        setup_logging(level="WARNING", verbose=True)

        handler_id = logger.add(lambda msg: messages.append(str(msg)))
        try:
            logger.debug("debug message")
            assert any("debug message" in msg for msg in messages)
        finally:
            logger.remove(handler_id)

    def test_file_sink_from_config(self, tmp_path: Path) -> None:
        """A log_file in LoggingConfig adds a DEBUG file sink."""
        log_file = tmp_path / "dispatch.log"
        setup_logging(LoggingConfig(log_file=str(log_file)), level="WARNING")

        with bind_item(9):
            logger.debug("written to file only")
        logger.remove()  # closes the file sink and flushes

        text = log_file.read_text()
        assert "written to file only" in text
        assert "'item': 9" in text


class TestStdlibRouting:
    """Tests for stdlib logging interception."""

    def test_stdlib_records_reach_loguru(self, captured: list[str]) -> None:
        """Records from logging.getLogger() appear in loguru sinks."""
        logging.getLogger("document_dispatcher.dispatch.scheduler").warning("tick late")

        assert any("tick late" in msg for msg in captured)

    def test_records_keep_logger_name(self) -> None:
        """Dispatcher module names are bound as extra[name]."""
        messages: list[str] = []
        setup_logging(level="DEBUG")

        handler_id = logger.add(
            lambda msg: messages.append(str(msg)),
            format="{extra[name]} | {message}",
        )
        try:
            logging.getLogger("document_dispatcher.dispatch.scheduler").info("tick")
            assert "document_dispatcher.dispatch.scheduler | tick\n" in messages
        finally:
            logger.remove(handler_id)

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("DEBUG", logging.DEBUG), ("INFO", logging.WARNING), ("ERROR", logging.WARNING)],
    )
    def test_httpx_logging_controlled(self, level: str, expected: int) -> None:
        """httpx is only chatty at DEBUG."""
        setup_logging(level=level)  # type: ignore[arg-type]

        assert logging.getLogger("httpx").level == expected
        assert logging.getLogger("httpcore").level == expected


class TestContextBinding:
    """Tests for run and item context."""

    def test_get_logger_binds_name(self, captured: list[str]) -> None:
        get_logger("my_test_module").info("Test message")

        assert any("my_test_module" in msg for msg in captured)

    def test_bind_run_is_scoped(self, captured: list[str]) -> None:
        """The run name is attached inside the block only."""
        with bind_run("documents.json"):
            logger.info("Inside run")
        logger.info("Outside run")

        assert "documents.json" in captured[0]
        assert "documents.json" not in captured[1]

    def test_bind_item_is_scoped(self, captured: list[str]) -> None:
        with bind_item(3):
            logger.info("Inside item")
        logger.info("Outside item")

        assert "'item': 3" in captured[0]
        assert "'item'" not in captured[1]

    @pytest.mark.asyncio
    async def test_delivery_records_carry_item(self, captured: list[str]) -> None:
        """Everything the executor logs for an item is tagged with its sequence."""
        executor = DeliveryExecutor(RecordingTransport(fail_doc_ids={"bad"}))

        await executor.execute(WorkItem(7, b'{"doc_id": "bad"}'))
        logger.info("after delivery")

        delivery_lines = [msg for msg in captured if "dispatch.executor" in msg]
        failure = [msg for msg in delivery_lines if "Delivery #7 failed" in msg]
        assert failure
        assert all("'item': 7" in msg for msg in delivery_lines)
        assert "'item'" not in captured[-1]

    @pytest.mark.asyncio
    async def test_concurrent_deliveries_keep_their_own_item(
        self, captured: list[str]
    ) -> None:
        """Each delivery task sees only its own item number."""
        executor = DeliveryExecutor(RecordingTransport(latency=0.01, fail_doc_ids={"a", "b"}))

        await asyncio.gather(
            executor.execute(WorkItem(1, b'{"doc_id": "a"}')),
            executor.execute(WorkItem(2, b'{"doc_id": "b"}')),
        )

        first = next(msg for msg in captured if "Delivery #1 failed" in msg)
        second = next(msg for msg in captured if "Delivery #2 failed" in msg)
        assert "'item': 1" in first
        assert "'item': 2" in second
