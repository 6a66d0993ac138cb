"""Configuration loading for the PDF Extractor.

Configuration is supplied by the host environment (shell or MCP client
config), never by tool arguments. Every setting has a safe default so the
server starts with an empty environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

DEFAULT_DPI = 150
DEFAULT_MAX_DPI = 1200
DEFAULT_JPEG_QUALITY = 85
DEFAULT_MAX_FILE_SIZE_MB = 100


@dataclass(frozen=True, slots=True)
class ExtractorConfig:
    """Extraction defaults and safety limits."""

    default_dpi: int = DEFAULT_DPI
    max_dpi: int = DEFAULT_MAX_DPI
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_MB * 1024 * 1024

    # Root restriction applies only when allow_any_path is False.
    allow_any_path: bool = True
    allowed_root: Path = field(default_factory=Path.cwd)

    debug: bool = False


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _parse_int(name: str, default: int, minimum: int, maximum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ConfigError(f"{name} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"{name} must be at most {maximum}")
    return value


def load_config_from_env() -> ExtractorConfig:
    """Load and validate configuration from environment variables.

    Raises:
        ConfigError: If a variable is set to an invalid value.
    """
    max_dpi = _parse_int("PDF_EXTRACTOR_MAX_DPI", DEFAULT_MAX_DPI, minimum=1)
    default_dpi = _parse_int("PDF_EXTRACTOR_DEFAULT_DPI", DEFAULT_DPI, minimum=1, maximum=max_dpi)
    jpeg_quality = _parse_int("PDF_EXTRACTOR_JPEG_QUALITY", DEFAULT_JPEG_QUALITY, minimum=1, maximum=100)
    max_size_mb = _parse_int("PDF_EXTRACTOR_MAX_FILE_SIZE_MB", DEFAULT_MAX_FILE_SIZE_MB, minimum=1)

    allowed_root_raw = os.getenv("PDF_EXTRACTOR_ALLOWED_ROOT")
    allowed_root = Path(allowed_root_raw).expanduser().resolve() if allowed_root_raw else Path.cwd()

    return ExtractorConfig(
        default_dpi=default_dpi,
        max_dpi=max_dpi,
        jpeg_quality=jpeg_quality,
        max_file_size_bytes=max_size_mb * 1024 * 1024,
        allow_any_path=_parse_bool(os.getenv("PDF_EXTRACTOR_ALLOW_ANY_PATH"), default=True),
        allowed_root=allowed_root,
        debug=_parse_bool(os.getenv("DEBUG")),
    )
