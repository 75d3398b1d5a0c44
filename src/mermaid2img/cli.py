"""CLI entry point for mermaid2img."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import typer
from rich.panel import Panel
from rich.text import Text

import mermaid2img
from mermaid2img._cli import console, create_cli, fail, version_callback
from mermaid2img.batch import BatchCoordinator
from mermaid2img.config import RenderConfig, clamp_scale, load_config
from mermaid2img.errors import ConfigError, Mermaid2ImgError
from mermaid2img.logging import configure_logging

# Exit status when --strict is set and at least one diagram failed
EXIT_DIAGRAM_FAILURES = 2

# Leading integer of a --scale value; "3.5" and "3x" both read as 3
_SCALE_RE = re.compile(r"\s*([+-]?\d+)")

app = create_cli(
    "mermaid2img",
    "Render mermaid diagrams in markdown.",
)


def _print_startup_banner() -> None:
    """Print a startup banner to stderr."""
    lines = Text()
    lines.append("mermaid2img", style="bold cyan")
    lines.append(f" v{mermaid2img.__version__}\n", style="dim")
    lines.append("diagrams to images", style="dim")
    console.print(Panel(lines, border_style="blue", padding=(0, 1), expand=False))


def _parse_scale(raw: str | None) -> int | None:
    if raw is None:
        return None
    match = _SCALE_RE.match(raw)
    if match is None:
        raise fail("--scale must be a number (1-4)")
    return clamp_scale(int(match.group(1)))


def _resolve_config(
    config_path: Path | None,
    svg: bool,
    jpg: bool,
    b64: bool,
    files: bool,
    scale: str | None,
    strict: bool,
) -> RenderConfig:
    """Validate flag combinations and merge them over the config file."""
    if svg and jpg:
        raise fail("--svg and --jpg are mutually exclusive")
    if b64 and files:
        raise fail("--b64 and --files are mutually exclusive")
    if svg and files:
        raise fail("--files requires --jpg format")

    overrides = {
        "format": "svg" if svg else ("jpg" if jpg else None),
        "mode": "files" if files else ("b64" if b64 else None),
        "scale": _parse_scale(scale),
        "strict": True if strict else None,
    }
    try:
        return load_config(config_path).with_overrides(**overrides)
    except ConfigError as e:
        raise fail(str(e)) from e


@app.command(
    epilog=(
        "Output: <name>_mermaid2<fmt>.md alongside each source file.\n\n"
        "Examples:\n\n"
        "  mermaid2img --md README.md\n\n"
        "  mermaid2img --md docs/\n\n"
        "  mermaid2img --md README.md --svg\n\n"
        "  mermaid2img --md README.md --jpg --files"
    ),
)
def main(
    ctx: typer.Context,
    md: Path | None = typer.Option(
        None, "--md", help="Markdown file or folder to process (required)."
    ),
    svg: bool = typer.Option(False, "--svg", help="Inline SVG in markdown."),
    jpg: bool = typer.Option(False, "--jpg", help="JPEG images (default)."),
    b64: bool = typer.Option(
        False, "--b64", help="Embed as base64 data URIs (default)."
    ),
    files: bool = typer.Option(
        False, "--files", help="Export images to ./mermaid/ folder."
    ),
    scale: str | None = typer.Option(
        None, "--scale", help="Device scale factor, 1-4 (default: 2)."
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a .mermaid2img.yaml configuration file.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help=f"Exit with status {EXIT_DIAGRAM_FAILURES} if any diagram fails.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    _version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback("mermaid2img", mermaid2img.__version__),
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Render mermaid diagrams in markdown to SVG or JPEG.

    Each ```mermaid block is replaced in place; everything else in the
    document is copied unchanged. Diagrams that fail to render are left as
    raw mermaid blocks.
    """
    if md is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    configure_logging("DEBUG" if verbose else None)
    settings = _resolve_config(config, svg, jpg, b64, files, scale, strict)

    md_path = md.resolve()
    if not md_path.exists():
        raise fail(f"path not found: {md_path}")

    _print_startup_banner()

    coordinator = BatchCoordinator(settings)
    try:
        summary = asyncio.run(coordinator.run(md_path))
    except (Mermaid2ImgError, OSError, UnicodeDecodeError) as e:
        console.print(Text.assemble(("Fatal:", "bold red"), f" {e}"))
        raise typer.Exit(1) from e

    if settings.strict and summary.diagrams_failed:
        raise typer.Exit(EXIT_DIAGRAM_FAILURES)


def cli() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    cli()
