"""Per-diagram rendering with failure isolation.

Each diagram is rendered, captured and shaped into replacement text on its
own. Any error in those steps becomes a ``Failed`` outcome for that diagram
only; nothing is raised to the document or batch loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import cast

from mermaid2img.browser import DiagramRenderer
from mermaid2img.compositor import shape_file_image, shape_inline_image, shape_svg
from mermaid2img.logging import LogSpan
from mermaid2img.models import (
    DiagramBlock,
    EmbedMode,
    Failed,
    OutputFormat,
    Rendered,
    RenderResult,
    RenderStage,
    ReplacementDecision,
)

__all__ = ["RenderTarget", "decide", "render_diagram"]


@dataclass(frozen=True)
class RenderTarget:
    """Where and how one document's diagrams are emitted."""

    format: OutputFormat
    mode: EmbedMode
    base_name: str  # document name without extension
    image_dir: Path  # absolute folder for exported images
    image_dir_name: str = "mermaid"
    jpeg_quality: int | None = None

    def image_path(self, ordinal: int) -> Path:
        return self.image_dir / self.image_file_name(ordinal)

    def image_file_name(self, ordinal: int) -> str:
        return f"{self.base_name}-{ordinal}.jpg"

    def image_reference(self, ordinal: int) -> str:
        return f"./{self.image_dir_name}/{self.image_file_name(ordinal)}"


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


async def render_diagram(
    renderer: DiagramRenderer,
    source: str,
    fmt: OutputFormat,
    quality: int | None = None,
) -> RenderResult | Failed:
    """Render one diagram, capturing a JPEG when ``fmt`` is jpg.

    Returns:
        RenderResult on success, or Failed tagged with the step that broke.
    """
    try:
        svg = await renderer.render(source)
    except Exception as e:
        return Failed(_describe(e), RenderStage.RENDER)

    if fmt is not OutputFormat.JPG:
        return RenderResult(svg=svg)

    try:
        jpeg = await renderer.capture_raster(quality)
    except Exception as e:
        return Failed(_describe(e), RenderStage.CAPTURE)
    if not jpeg:
        return Failed("Screenshot capture failed", RenderStage.CAPTURE)

    return RenderResult(svg=svg, jpeg=jpeg)


def _shape(result: RenderResult, block: DiagramBlock, target: RenderTarget) -> str:
    """Turn a render result into replacement text, exporting files if needed."""
    if target.format is OutputFormat.SVG:
        return shape_svg(result.svg)

    # render_diagram always captures for jpg
    jpeg = cast("bytes", result.jpeg)
    if target.mode is EmbedMode.B64:
        return shape_inline_image(jpeg, block.ordinal)

    target.image_path(block.ordinal).write_bytes(jpeg)
    return shape_file_image(target.image_reference(block.ordinal), block.ordinal)


async def decide(
    renderer: DiagramRenderer,
    block: DiagramBlock,
    target: RenderTarget,
) -> ReplacementDecision:
    """Render ``block`` and decide what replaces its span."""
    with LogSpan(span="diagram.render", ordinal=block.ordinal) as s:
        result = await render_diagram(
            renderer, block.source, target.format, target.jpeg_quality
        )

        if isinstance(result, Failed):
            s.add(stage=result.stage.value, failure=result.reason)
            return ReplacementDecision(block.span, result)

        try:
            text = _shape(result, block, target)
        except OSError as e:
            failed = Failed(_describe(e), RenderStage.EMBED)
            s.add(stage=failed.stage.value, failure=failed.reason)
            return ReplacementDecision(block.span, failed)

        s.add(chars=len(text))
        return ReplacementDecision(block.span, Rendered(text))
