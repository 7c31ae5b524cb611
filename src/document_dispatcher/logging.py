"""Logging for the document dispatcher, built on loguru.

The dispatch core logs through the standard library (``logging.getLogger``)
so it stays usable without any setup. ``setup_logging`` routes those records
into loguru, where they carry two pieces of dispatcher context:

- ``run``: the batch being dispatched (bound with ``bind_run``)
- ``item``: the sequence number of the work item being delivered (bound
  with ``bind_item`` around each delivery)

Both show up in the console line and in the optional rotating log file.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

    from document_dispatcher.config import LoggingConfig

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Loggers outside the package that the dispatcher drives
_TRANSPORT_LOGGERS = ("httpx", "httpcore")

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru.

    The record's logger name is bound as ``name``, so the console shows
    ``document_dispatcher.dispatch.executor`` rather than this module.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames to report the real caller
        frame = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )


def _console_format(record: Record) -> str:
    """One console line, with run and item context when bound."""
    context = ""
    if "run" in record["extra"]:
        context += " <magenta>[{extra[run]}]</magenta>"
    if "item" in record["extra"]:
        context += " <yellow>#{extra[item]}</yellow>"

    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        "<cyan>{extra[name]}</cyan>" + context + " - <level>{message}</level>\n{exception}"
    )


def resolve_level(level: LogLevel, *, verbose: bool = False, quiet: bool = False) -> LogLevel:
    """Apply the --verbose/--quiet overrides; verbose wins over quiet."""
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return level


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    level: LogLevel = "INFO",
    verbose: bool = False,
    quiet: bool = False,
) -> Logger:
    """Configure console (and optional file) logging for a dispatcher run.

    Args:
        config: File sink settings; no file is written when omitted or when
            ``config.log_file`` is unset
        level: Console level from settings
        verbose: Force DEBUG on the console
        quiet: Force WARNING on the console

    Returns:
        The configured loguru logger
    """
    console_level = resolve_level(level, verbose=verbose, quiet=quiet)

    logger.remove()
    logger.configure(extra={"name": "document_dispatcher"})
    logger.add(
        sys.stderr,
        level=console_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if config is not None and config.log_file:
        # The file keeps every delivery at DEBUG regardless of console level
        logger.add(
            config.log_file,
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            serialize=config.serialize,
        )

    _route_stdlib(console_level)
    return logger


def _route_stdlib(level: LogLevel) -> None:
    """Send the dispatch core and the HTTP stack through loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    transport_level = logging.DEBUG if level in ("TRACE", "DEBUG") else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str) -> Logger:
    """Loguru logger with ``name`` bound, for modules that log via loguru."""
    return logger.bind(name=name)


def bind_run(run: str) -> AbstractContextManager[None]:
    """Tag every record inside the block with the dispatch run name.

    Usage:
        with bind_run("documents.json"):
            await dispatcher.start()
    """
    return logger.contextualize(run=run)


def bind_item(sequence: int) -> AbstractContextManager[None]:
    """Tag every record inside the block with a work item's sequence number.

    The binding lives in a context variable, so each delivery task carries
    its own item number.
    """
    return logger.contextualize(item=sequence)
