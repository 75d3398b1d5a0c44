"""Shared typer/rich helpers for the command line."""

from __future__ import annotations

from collections.abc import Callable

import typer
from rich.console import Console
from rich.text import Text

# Diagnostics and banner go to stderr; progress goes to stdout
console = Console(stderr=True, highlight=False, soft_wrap=True)


def create_cli(name: str, help_text: str, **kwargs: object) -> typer.Typer:
    """Create a typer app with the project's defaults."""
    return typer.Typer(
        name=name,
        help=help_text,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
        **kwargs,  # type: ignore[arg-type]
    )


def version_callback(name: str, version: str) -> Callable[[bool | None], None]:
    """Build an eager ``--version`` callback that prints and exits."""

    def callback(value: bool | None) -> None:
        if value:
            typer.echo(f"{name} v{version}")
            raise typer.Exit()

    return callback


def fail(message: str, exit_code: int = 1) -> typer.Exit:
    """Print an error to stderr and return the Exit to raise."""
    console.print(Text.assemble(("Error:", "red"), f" {message}"))
    return typer.Exit(exit_code)
