"""Dispatch documents from a file to the configured endpoint."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.table import Table

from document_dispatcher.cli.common import (
    LimitOption,
    UrlOption,
    WindowOption,
    console,
    dump_documents,
    load_documents,
    run_async_command,
)
from document_dispatcher.codec import JsonCodec
from document_dispatcher.config import DispatchConfig, get_settings
from document_dispatcher.dispatch import Dispatcher, HttpTransport
from document_dispatcher.exceptions import DeliveryError
from document_dispatcher.logging import bind_run
from document_dispatcher.schemas import Document


@dataclass
class SendSummary:
    """Outcome of one ``send`` run."""

    submitted: int = 0
    responses: list[Any] = field(default_factory=list)
    errors: list[DeliveryError] = field(default_factory=list)
    undelivered: list[Document] = field(default_factory=list)
    still_in_flight: int = 0


def send(
    file: Annotated[
        Path,
        typer.Argument(help="JSON file holding an array of documents"),
    ],
    limit: LimitOption = None,
    window: WindowOption = None,
    url: UrlOption = None,
    run_for: Annotated[
        float,
        typer.Option(
            "--run-for",
            min=0.0,
            help="Seconds to keep releasing before shutting down",
        ),
    ] = 5.0,
    wait_timeout: Annotated[
        float,
        typer.Option(
            "--wait-timeout",
            min=0.0,
            help="Seconds to wait for in-flight deliveries after shutdown (0 = don't wait)",
        ),
    ] = 30.0,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write documents left undelivered to this file",
        ),
    ] = None,
) -> None:
    """Submit every document in FILE and report what was delivered.

    Examples:
        docdispatch send documents.json
        docdispatch send documents.json --limit 2 --window 1 --run-for 3
        docdispatch send documents.json -o undelivered.json
    """
    settings = get_settings()
    config = DispatchConfig(
        limit=limit or settings.dispatch.limit,
        window_seconds=window or settings.dispatch.window_seconds,
    )
    transport_config = settings.transport
    if url:
        transport_config = transport_config.model_copy(update={"url": url})

    documents = load_documents(file)

    async def _send() -> SendSummary:
        summary = SendSummary(submitted=len(documents))

        async with HttpTransport(transport_config) as transport:
            dispatcher: Dispatcher[Document] = Dispatcher(transport, JsonCodec(Document), config)

            with bind_run(file.name):
                await dispatcher.start()
                for document in documents:
                    dispatcher.submit(
                        document,
                        on_complete=summary.responses.append,
                        on_error=summary.errors.append,
                    )

                await asyncio.sleep(run_for)
                summary.undelivered = await dispatcher.shutdown()

                if wait_timeout > 0:
                    await dispatcher.wait_in_flight(timeout=wait_timeout)
                summary.still_in_flight = dispatcher.in_flight

        return summary

    console.print(
        f"[bold]Dispatching {len(documents)} document(s) to {transport_config.url}[/bold] "
        f"(limit {config.limit} per {config.window_seconds:g}s)"
    )
    summary = run_async_command(_send(), error_prefix="Dispatch failed")
    _print_summary(summary)

    if output is not None and summary.undelivered:
        dump_documents(summary.undelivered, output)
        console.print(f"Undelivered documents written to {output}")


def _print_summary(summary: SendSummary) -> None:
    table = Table(title="Dispatch summary")
    table.add_column("Outcome")
    table.add_column("Count", justify="right")

    table.add_row("Submitted", str(summary.submitted))
    table.add_row("[green]Responses[/green]", str(len(summary.responses)))
    table.add_row("[red]Failed[/red]", str(len(summary.errors)))
    table.add_row("[yellow]Undelivered (returned)[/yellow]", str(len(summary.undelivered)))
    table.add_row("Still in flight", str(summary.still_in_flight))

    console.print(table)

    for error in summary.errors[:5]:
        console.print(f"  [red]{error}[/red]")
    if len(summary.errors) > 5:
        console.print(f"  ... and {len(summary.errors) - 5} more")
