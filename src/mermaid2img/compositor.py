"""Fold per-diagram decisions back into the document text.

Edits are applied from the highest offset down. Every span still to be
consumed lies left of all edits already made, so the offsets recorded by the
locator stay valid no matter how long each replacement is. The source string
is never mutated; the result is assembled from slices of it.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable

from mermaid2img.models import Failed, Rendered, ReplacementDecision

__all__ = [
    "compose",
    "image_reference",
    "shape_file_image",
    "shape_inline_image",
    "shape_svg",
]


def compose(text: str, decisions: Iterable[ReplacementDecision]) -> str:
    """Apply replacement decisions to ``text``.

    Args:
        text: Original document text.
        decisions: One decision per located span, any order.

    Returns:
        The document with every ``Rendered`` span substituted and every
        ``Failed`` span left exactly as it was.

    Raises:
        ValueError: If spans overlap or fall outside ``text``.
    """
    ordered = sorted(decisions, key=lambda d: d.span.start, reverse=True)

    pieces: list[str] = []
    cursor = len(text)
    for decision in ordered:
        start, end = decision.span.start, decision.span.end
        if end > cursor:
            if cursor == len(text):
                raise ValueError(
                    f"Span [{start}, {end}) is outside text of length {len(text)}"
                )
            raise ValueError(f"Span [{start}, {end}) overlaps a later span")

        pieces.append(text[end:cursor])
        match decision.outcome:
            case Rendered(text=replacement):
                pieces.append(replacement)
            case Failed():
                pieces.append(text[start:end])
        cursor = start

    pieces.append(text[:cursor])
    return "".join(reversed(pieces))


def shape_svg(svg: str) -> str:
    """Inline SVG surrounded by blank lines so it stays a separate HTML block."""
    return f"\n{svg}\n"


def image_reference(target: str, ordinal: int) -> str:
    """Markdown image reference captioned with the diagram's ordinal."""
    return f"![Diagram {ordinal}]({target})"


def shape_inline_image(jpeg: bytes, ordinal: int) -> str:
    """Reference embedding the JPEG as a base64 data URI."""
    encoded = base64.b64encode(jpeg).decode("ascii")
    return image_reference(f"data:image/jpeg;base64,{encoded}", ordinal)


def shape_file_image(relative_path: str, ordinal: int) -> str:
    """Reference pointing at an exported image file."""
    return image_reference(relative_path, ordinal)
