"""Structured logging for mermaid2img.

Logs go to stderr through loguru. ``LogSpan`` wraps a unit of work, times it
and emits a single record with the collected attributes when it exits.
"""

from __future__ import annotations

import os
import sys
import time
from typing import Any

from loguru import logger

__all__ = ["LogSpan", "configure_logging", "logger"]

DEFAULT_LEVEL = "WARNING"

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str | None = None) -> None:
    """Install the stderr sink.

    Args:
        level: Log level name. Falls back to MERMAID2IMG_LOG_LEVEL, then WARNING.
    """
    resolved = (level or os.getenv("MERMAID2IMG_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, level=resolved, format=_FORMAT, backtrace=False)


class LogSpan:
    """A timed logging span.

    Example:
        >>> with LogSpan(span="diagram.render", ordinal=1) as s:
        ...     svg = await session.render(source)
        ...     s.add(svg_chars=len(svg))
    """

    def __init__(self, span: str, level: str = "DEBUG", **attrs: Any) -> None:
        """Initialize a log span.

        Args:
            span: Span name (e.g., "document.process")
            level: Level used when the span completes without error
            **attrs: Initial attributes to log
        """
        self.name = span
        self.level = level
        self.attrs: dict[str, Any] = dict(attrs)
        self.start_time = time.monotonic()
        self.error: str | None = None

    def add(self, key: str | None = None, value: Any = None, **attrs: Any) -> LogSpan:
        """Add attributes to the span. Returns self for chaining."""
        if key is not None:
            self.attrs[key] = value
        self.attrs.update(attrs)
        return self

    @property
    def elapsed_ms(self) -> float:
        return round((time.monotonic() - self.start_time) * 1000, 2)

    def _emit(self) -> None:
        fields = " ".join(f"{k}={v}" for k, v in self.attrs.items())
        message = f"{self.name} elapsed_ms={self.elapsed_ms}"
        if fields:
            message = f"{message} {fields}"
        bound = logger.bind(span=self.name, **self.attrs)
        if self.error:
            bound.warning(f"{message} error={self.error!r}")
        else:
            bound.log(self.level, message)

    def __enter__(self) -> LogSpan:
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, _tb: Any) -> None:
        if exc is not None:
            self.error = f"{type(exc).__name__}: {exc}"
        self._emit()
