"""Core render session - browser lifecycle and SVG rendering.

One headless Chromium page hosts mermaid.js for the whole run. The page is a
single shared surface, so callers must await each render before starting the
next one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Self

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from mermaid2img.errors import DiagramRenderError, SessionInitError
from mermaid2img.logging import LogSpan, logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

    from mermaid2img.config import RenderConfig

# Page template with mermaid.js loader and window._render hook
_TEMPLATE_PATH = Path(__file__).parent / "render.html"

_RENDER_JS = """async (code) => {
  const svg = await window._render(code);
  document.body.innerHTML = svg;
  return svg;
}"""


def _get_page_template() -> str:
    """Load the render page template."""
    if _TEMPLATE_PATH.exists():
        return _TEMPLATE_PATH.read_text(encoding="utf-8")
    raise FileNotFoundError(f"Render page template not found: {_TEMPLATE_PATH}")


def build_page_html(config: RenderConfig) -> str:
    """Fill the page template with values from config, quoted as JS literals."""
    replacements = {
        "__MERMAID_CDN__": config.mermaid_cdn,
        "__THEME__": config.theme,
        "__FONT_FAMILY__": config.font_family,
        "__FONT_SIZE__": config.font_size,
    }
    html = _get_page_template()
    for token, value in replacements.items():
        html = html.replace(token, json.dumps(value))
    return html


def first_line(error: BaseException) -> str:
    """First non-empty line of an error message."""
    for line in str(error).splitlines():
        if line.strip():
            return line.strip()
    return type(error).__name__


@dataclass
class SessionState:
    """Playwright objects owned by a session (None when closed)."""

    playwright: Playwright | None = None
    browser: Browser | None = None
    page: Page | None = None
    render_count: int = 0


class RenderSessionCore:
    """Browser lifecycle and SVG rendering."""

    def __init__(self, config: RenderConfig) -> None:
        self.config = config
        self.state = SessionState()

    @property
    def is_open(self) -> bool:
        return self.state.page is not None

    async def start(self) -> None:
        """Launch Chromium and load mermaid.js.

        Raises:
            SessionInitError: If the browser cannot start or mermaid.js does
                not load within ``config.init_timeout`` seconds.
        """
        config = self.config
        timeout_ms = config.init_timeout * 1000
        with LogSpan(span="session.start", level="INFO", scale=config.scale) as span:
            try:
                self.state.playwright = await async_playwright().start()
                self.state.browser = await self.state.playwright.chromium.launch(
                    headless=config.headless,
                    args=list(config.browser_args),
                )
                page = await self.state.browser.new_page(
                    viewport={
                        "width": config.viewport_width,
                        "height": config.viewport_height,
                    },
                    device_scale_factor=config.scale,
                )
                self.state.page = page
            except PlaywrightError as e:
                await self.close()
                raise SessionInitError(
                    f"Could not launch headless Chromium: {first_line(e)}\n"
                    "Run `playwright install chromium` if the browser is missing."
                ) from e

            # The CDN module import holds up the load event set_content waits on
            try:
                await page.set_content(build_page_html(config), timeout=timeout_ms)
                await page.wait_for_function(
                    "() => typeof window._render === 'function'",
                    timeout=timeout_ms,
                )
            except PlaywrightError as e:
                await self.close()
                raise SessionInitError(
                    "Mermaid failed to load — check your network connection.\n"
                    f"CDN: {config.mermaid_cdn}"
                ) from e
            span.add(cdn=config.mermaid_cdn)

    async def render(self, source: str) -> str:
        """Render diagram source to SVG markup and place it on the page.

        Raises:
            DiagramRenderError: If mermaid.js rejects the source.
        """
        page = self._require_page()
        self.state.render_count += 1
        try:
            svg = await page.evaluate(_RENDER_JS, source)
        except PlaywrightError as e:
            raise DiagramRenderError(first_line(e)) from e
        if not isinstance(svg, str) or not svg:
            raise DiagramRenderError("mermaid returned no SVG")
        return svg

    def _require_page(self) -> Page:
        if self.state.page is None:
            raise RuntimeError("Render session is not started")
        return self.state.page

    async def close(self) -> None:
        """Close the page and browser and stop Playwright."""
        state = self.state

        try:
            if state.page:
                await state.page.close()
        except PlaywrightError as e:
            logger.debug(f"Ignoring error while closing page: {e}")

        try:
            if state.browser:
                await state.browser.close()
        except PlaywrightError as e:
            logger.debug(f"Ignoring error while closing browser: {e}")

        if state.playwright:
            await state.playwright.stop()

        logger.debug(f"Render session closed after {state.render_count} render(s)")
        self.state = SessionState()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()
