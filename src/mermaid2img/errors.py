"""Exception hierarchy for mermaid2img.

Fatal errors (``ConfigError``, ``SessionInitError``) abort the whole run.
``RenderFailure`` subclasses are raised by the render session and caught per
diagram by the orchestrator.
"""

from __future__ import annotations


class Mermaid2ImgError(Exception):
    """Base class for all mermaid2img errors."""


class ConfigError(Mermaid2ImgError):
    """Invalid configuration file or option combination."""


class SessionInitError(Mermaid2ImgError):
    """The browser or mermaid.js could not be initialised."""


class RenderFailure(Mermaid2ImgError):
    """A single diagram could not be rendered."""


class DiagramRenderError(RenderFailure):
    """mermaid.js rejected the diagram source or timed out."""


class RasterCaptureError(RenderFailure):
    """The rendered SVG could not be captured as a raster image."""
