# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings. Environment
variables use the ``LESSCACHE_`` prefix, e.g. ``LESSCACHE_DEBUG=true`` or
``LESSCACHE_MODULE_ASSET_ROOTS='{"blog": "plugins/blog/webroot"}'``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lesscache.assets.registry import canonical_module_name


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_prefix="LESSCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === General ===
    debug: bool = False

    # === Assets ===
    webroot: Path = Path("webroot")
    base_url: str = ""
    module_asset_roots: dict[str, Path] = {}
    module_url_prefixes: dict[str, str] = {}
    namespace_delimiter: str = "."

    # === Compiler ===
    compress: bool = True
    max_import_depth: int = 32

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["file", "memory"] = "file"
    css_dir: str = "css"
    artifact_prefix: str = "lesscache_"

    # === Client-side fallback ===
    less_js_url: str = "/less/js/less.min.js"
    less_js_env: Literal["production", "development"] = "production"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("namespace_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:  # noqa: N805
        """The module delimiter is one character and cannot be a path separator."""
        if len(v) != 1 or v in ("/", "\\") or v.isspace():
            raise ValueError("namespace_delimiter must be a single non-separator character")
        return v

    @field_validator("max_import_depth")
    @classmethod
    def validate_import_depth(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("max_import_depth must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        seen: dict[str, str] = {}
        for name in self.module_asset_roots:
            canonical = canonical_module_name(name)
            if canonical in seen:
                errors.append(
                    f"MODULE_ASSET_ROOTS names {seen[canonical]!r} and {name!r} "
                    f"both canonicalize to {canonical!r}"
                )
            seen[canonical] = name

        unknown = {
            canonical_module_name(n) for n in self.module_url_prefixes
        } - set(seen)
        if unknown:
            errors.append(
                "MODULE_URL_PREFIXES given for unregistered module(s): "
                + ", ".join(sorted(unknown))
            )

        if not self.css_dir.strip("/"):
            errors.append("CSS_DIR must name a directory under WEBROOT")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_dir(self) -> Path:
        """Directory compiled artifacts are written to."""
        return self.webroot.expanduser() / self.css_dir.strip("/")


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
