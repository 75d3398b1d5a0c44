"""Locate fenced mermaid blocks in Markdown text."""

from __future__ import annotations

import re

from mermaid2img.models import DiagramBlock, Span

__all__ = ["MERMAID_RE", "find_diagrams"]

# Both fences must start a line. The closing fence may only be followed by
# horizontal whitespace; the span stops before the line break.
MERMAID_RE = re.compile(
    r"^```mermaid[^\n]*\n(?P<body>[\s\S]*?)^```[ \t]*(?=\r?$)",
    re.MULTILINE,
)


def find_diagrams(text: str) -> list[DiagramBlock]:
    """Return every mermaid block in document order.

    Args:
        text: Full document text.

    Returns:
        Blocks with trimmed source and their span in ``text``. Empty when the
        document has no complete mermaid fence.
    """
    return [
        DiagramBlock(
            source=match.group("body").strip(),
            span=Span(match.start(), match.end()),
            ordinal=ordinal,
        )
        for ordinal, match in enumerate(MERMAID_RE.finditer(text), start=1)
    ]
