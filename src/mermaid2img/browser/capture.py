"""Render capture mixin - raster snapshot of the rendered diagram."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from playwright.async_api import Error as PlaywrightError

from mermaid2img.browser.core import first_line
from mermaid2img.errors import RasterCaptureError

if TYPE_CHECKING:
    from playwright.async_api import Page

    from mermaid2img.config import RenderConfig


class _RenderCoreProtocol(Protocol):
    """Protocol defining members expected from RenderSessionCore."""

    config: RenderConfig

    def _require_page(self) -> Page: ...


class RenderCaptureMixin(_RenderCoreProtocol):
    """Mixin providing JPEG capture of the SVG currently on the page."""

    async def capture_raster(self, quality: int | None = None) -> bytes:
        """Screenshot the rendered SVG element as JPEG.

        The device scale factor set when the session started controls the
        pixel density.

        Args:
            quality: JPEG quality (defaults to config.jpeg_quality).

        Raises:
            RasterCaptureError: If no SVG is on the page or the screenshot fails.
        """
        page = self._require_page()
        element = await page.query_selector("svg")
        if element is None:
            raise RasterCaptureError("SVG element not found after rendering")

        try:
            return await element.screenshot(
                type="jpeg",
                quality=quality if quality is not None else self.config.jpeg_quality,
            )
        except PlaywrightError as e:
            raise RasterCaptureError(f"Screenshot capture failed: {first_line(e)}") from e
