"""Common CLI option factories and helpers.

It provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- Option type aliases shared by dispatch commands
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console

from document_dispatcher.schemas import Document

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")

_documents_adapter = TypeAdapter(list[Document])


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


# Annotated aliases keep typer.Option() calls out of default arguments (B008).

LimitOption = Annotated[
    int | None,
    typer.Option(
        "--limit",
        "-l",
        min=1,
        help="Maximum deliveries started per window (default from settings)",
    ),
]

WindowOption = Annotated[
    float | None,
    typer.Option(
        "--window",
        "-w",
        min=0.001,
        help="Window length in seconds (default from settings)",
    ),
]

UrlOption = Annotated[
    str | None,
    typer.Option(
        "--url",
        help="Override the delivery endpoint URL",
    ),
]


# -----------------------------------------------------------------------------
# Document File Helpers
# -----------------------------------------------------------------------------


def load_documents(path: Path) -> list[Document]:
    """Read a JSON array of documents from a file.

    Args:
        path: File containing a JSON array of document objects

    Returns:
        Parsed documents, in file order

    Raises:
        typer.Exit(1): If the file is missing or does not hold valid documents
    """
    try:
        return _documents_adapter.validate_json(path.read_bytes())
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot read {path}: {e.strerror}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        console.print(
            f"[red]Error:[/red] Not a JSON array of documents: {path} "
            f"({e.error_count()} validation error(s))"
        )
        raise typer.Exit(1) from None


def dump_documents(documents: list[Document], path: Path) -> None:
    """Write documents to a file as a JSON array."""
    path.write_bytes(_documents_adapter.dump_json(documents, indent=2))
