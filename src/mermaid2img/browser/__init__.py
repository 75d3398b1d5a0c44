"""Render session package.

Provides mermaid rendering and raster capture via Playwright.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .capture import RenderCaptureMixin
from .core import RenderSessionCore, build_page_html

__all__ = ["DiagramRenderer", "RenderSession", "build_page_html"]


@runtime_checkable
class DiagramRenderer(Protocol):
    """What the orchestrator needs from a render session."""

    async def render(self, source: str) -> str: ...

    async def capture_raster(self, quality: int | None = None) -> bytes: ...


class RenderSession(RenderSessionCore, RenderCaptureMixin):
    """Complete render session.

    Composed from:
    - RenderSessionCore: browser lifecycle, mermaid.js loading, SVG rendering
    - RenderCaptureMixin: JPEG capture of the rendered SVG
    """

    pass
