"""Shared fixtures: a fake render session standing in for Chromium."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from rich.console import Console

from mermaid2img.config import RenderConfig
from mermaid2img.errors import DiagramRenderError, RasterCaptureError


class FakeRenderer:
    """Renders ``<svg>source</svg>`` and fake JPEG bytes.

    Sources containing ``FAIL`` raise on render; sources containing
    ``NOCAPTURE`` render but raise on capture.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()
        self.rendered: list[str] = []
        self.captures = 0
        self.opened = 0
        self.closed = 0
        self._current: str | None = None

    async def render(self, source: str) -> str:
        self.rendered.append(source)
        self._current = None
        if "FAIL" in source:
            raise DiagramRenderError("Parse error on line 1")
        self._current = source
        return f"<svg>{source}</svg>"

    async def capture_raster(self, quality: int | None = None) -> bytes:
        self.captures += 1
        if self._current is None:
            raise RasterCaptureError("SVG element not found after rendering")
        if "NOCAPTURE" in self._current:
            raise RasterCaptureError("Screenshot capture failed")
        return b"\xff\xd8" + self._current.encode()

    async def __aenter__(self) -> FakeRenderer:
        self.opened += 1
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        self.closed += 1


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    """A fresh fake render session."""
    return FakeRenderer()


@pytest.fixture
def session_factory(
    fake_renderer: FakeRenderer,
) -> Callable[[RenderConfig], FakeRenderer]:
    """Session factory that always hands out ``fake_renderer``."""

    def factory(config: RenderConfig) -> FakeRenderer:
        fake_renderer.config = config
        return fake_renderer

    return factory


@pytest.fixture
def quiet_console() -> Console:
    """Console writing to an in-memory buffer (read via ``.file.getvalue()``)."""
    import io

    return Console(file=io.StringIO(), width=200, highlight=False, soft_wrap=True)
