"""TOML configuration loader for omniscan."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_TEMPERATURE = 0.4


@dataclass
class GeminiProviderConfig:
    api_key: str = ""
    model: str = "gemini-2.5-flash-image"


@dataclass
class ClaudeProviderConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 2048


@dataclass
class ProviderConfig:
    backend: str = "gemini"
    temperature: float = DEFAULT_TEMPERATURE
    gemini: GeminiProviderConfig = field(default_factory=GeminiProviderConfig)
    claude: ClaudeProviderConfig = field(default_factory=ClaudeProviderConfig)


@dataclass
class CameraConfig:
    jpeg_quality: int = 90
    max_side: int = 1600  # longest edge sent to the provider, in pixels
    max_index: int = 10


@dataclass
class ScanConfig:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)


def load_config(path: str | Path | None = None) -> ScanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    prv = raw.get("provider", {})
    cam = raw.get("camera", {})

    gemini_cfg = prv.get("gemini", {})
    claude_cfg = prv.get("claude", {})

    # Resolve API keys: config file → environment variable
    gemini_api_key = (
        gemini_cfg.get("api_key", "")
        or os.environ.get("GEMINI_API_KEY", "")
        or os.environ.get("API_KEY", "")
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    return ScanConfig(
        provider=ProviderConfig(
            backend=prv.get("backend", "gemini"),
            temperature=prv.get("temperature", DEFAULT_TEMPERATURE),
            gemini=GeminiProviderConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.5-flash-image"),
            ),
            claude=ClaudeProviderConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
                max_tokens=claude_cfg.get("max_tokens", 2048),
            ),
        ),
        camera=CameraConfig(
            jpeg_quality=cam.get("jpeg_quality", 90),
            max_side=cam.get("max_side", 1600),
            max_index=cam.get("max_index", 10),
        ),
    )
