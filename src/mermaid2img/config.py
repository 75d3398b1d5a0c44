"""Configuration for mermaid2img.

Loads .mermaid2img.yaml with render and discovery settings. Command-line flags
are applied on top with ``RenderConfig.with_overrides``.

Example .mermaid2img.yaml:

    format: jpg
    mode: files
    scale: 3
    jpeg_quality: 90
    theme: neutral
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, model_validator

from mermaid2img.errors import ConfigError
from mermaid2img.models import EmbedMode, OutputFormat

CONFIG_ENV_VAR = "MERMAID2IMG_CONFIG"
CONFIG_FILE_NAME = ".mermaid2img.yaml"

MERMAID_CDN = "https://cdn.jsdelivr.net/npm/mermaid@11/dist/mermaid.esm.min.mjs"

MIN_SCALE = 1
MAX_SCALE = 4


class RenderConfig(BaseModel):
    """Settings for one conversion run."""

    # Output
    format: OutputFormat = Field(
        default=OutputFormat.JPG, description="Output format: svg or jpg"
    )
    mode: EmbedMode = Field(
        default=EmbedMode.B64,
        description="Raster embedding: b64 data URIs or files in image_dir",
    )
    scale: int = Field(
        default=2,
        ge=MIN_SCALE,
        le=MAX_SCALE,
        description="Device scale factor for raster capture",
    )
    jpeg_quality: int = Field(default=92, ge=1, le=100, description="JPEG quality")

    # Rendering surface
    viewport_width: int = Field(default=1400, ge=1)
    viewport_height: int = Field(default=900, ge=1)
    mermaid_cdn: str = Field(
        default=MERMAID_CDN, description="ES module URL for mermaid.js"
    )
    theme: str = Field(default="default", description="mermaid theme name")
    font_family: str = Field(default="system-ui, -apple-system, sans-serif")
    font_size: str = Field(default="14px")
    init_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for mermaid.js to load before giving up",
    )
    headless: bool = Field(default=True, description="Run Chromium headless")
    browser_args: list[str] = Field(
        default_factory=list, description="Additional Chromium launch arguments"
    )

    # Discovery and naming
    extension: str = Field(default=".md", description="Document file extension")
    output_marker: str = Field(
        default="_mermaid2",
        min_length=1,
        description="Marker in generated file names; such files are never rescanned",
    )
    image_dir: str = Field(
        default="mermaid", min_length=1, description="Subfolder for exported images"
    )

    # Exit policy
    strict: bool = Field(
        default=False, description="Exit non-zero when any diagram fails to render"
    )

    @model_validator(mode="after")
    def _check_combination(self) -> RenderConfig:
        if self.format is OutputFormat.SVG and self.mode is EmbedMode.FILES:
            raise ValueError("--files requires --jpg format")
        return self

    def with_overrides(self, **overrides: Any) -> RenderConfig:
        """Return a validated copy with non-None overrides applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return RenderConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(_first_error(e)) from e


def _first_error(error: ValidationError) -> str:
    """Flatten a pydantic error to a single readable line."""
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = str(first.get("msg", error))
    msg = msg.removeprefix("Value error, ")
    return f"{loc}: {msg}" if loc else msg


def clamp_scale(value: int) -> int:
    """Clamp a device scale factor into the supported range."""
    return max(MIN_SCALE, min(MAX_SCALE, value))


def find_config_path() -> Path | None:
    """Locate a config file.

    Resolution order:
    1. MERMAID2IMG_CONFIG env var
    2. cwd/.mermaid2img.yaml
    3. ~/.mermaid2img.yaml
    """
    env_config = os.getenv(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config)

    for candidate in (Path.cwd() / CONFIG_FILE_NAME, Path.home() / CONFIG_FILE_NAME):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | str | None = None) -> RenderConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit path, or None to search the default locations.

    Returns:
        Validated RenderConfig (defaults when no file is found).

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    path = Path(config_path) if config_path is not None else find_config_path()
    if path is None:
        return RenderConfig()

    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug(f"Config file {path} does not exist, using defaults")
        return RenderConfig()

    try:
        with path.open(encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}") from e

    if raw_data is None:
        raw_data = {}
    if not isinstance(raw_data, dict):
        raise ConfigError(f"Invalid configuration in {path}: expected a mapping")

    try:
        config = RenderConfig.model_validate(raw_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {_first_error(e)}") from e

    logger.debug(f"Loaded config from {path}")
    return config
