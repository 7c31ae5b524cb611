"""Main CLI application for the document dispatcher."""

from typing import Annotated

import typer
from rich.console import Console

from document_dispatcher import __version__
from document_dispatcher.cli import send as send_cmd
from document_dispatcher.config import get_settings
from document_dispatcher.logging import setup_logging

app = typer.Typer(
    name="docdispatch",
    help="Deliver documents to a remote endpoint under a fixed rate limit.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"docdispatch version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Document dispatcher - rate-limited delivery with graceful drain."""
    settings = get_settings()
    setup_logging(settings.logging, level=settings.log_level, verbose=verbose, quiet=quiet)


@app.command()
def config() -> None:
    """Show the effective settings."""
    console.print_json(get_settings().model_dump_json())


app.command("send")(send_cmd.send)


if __name__ == "__main__":
    app()
