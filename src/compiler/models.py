# src/compiler/models.py — v1
"""Compiler domain models: ParserOptions, CompileRequest, CompileError, CompiledCss."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lesscache.assets.models import AssetReference, ResolvedAsset
from lesscache.compiler.variables import normalize_overrides


class ParserOptions(BaseModel):
    """Options handed to the LESS backend.

    ``source_map`` left as None means "follow the debug flag"; see
    :func:`effective_parser_options`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compress: bool = True
    source_map: bool | None = None
    strict_math: bool = False
    relative_urls: bool = True


def effective_parser_options(
    options: ParserOptions | dict[str, Any] | None, debug: bool
) -> ParserOptions:
    """Fill option defaults that depend on the debug flag."""
    if options is None:
        options = ParserOptions()
    elif isinstance(options, dict):
        options = ParserOptions(**options)
    if options.source_map is None:
        return options.model_copy(update={"source_map": debug})
    return options


class CompileRequest(BaseModel):
    """Everything a single compilation depends on.

    Sources are compiled in order; variable overrides apply after all of
    them have been assembled.
    """

    model_config = ConfigDict(frozen=True)

    sources: tuple[ResolvedAsset, ...]
    variable_overrides: dict[str, str] = Field(default_factory=dict)
    parser_options: ParserOptions = Field(default_factory=ParserOptions)

    @field_validator("variable_overrides", mode="before")
    @classmethod
    def _normalize_overrides(cls, v: dict[str, str] | None) -> dict[str, str]:
        return normalize_overrides(v)


class CompileError(BaseModel):
    """A failed compilation. Returned as a value, never raised to renderers."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parse", "import", "resolution"]
    message: str
    reference: AssetReference | None = None

    def __str__(self) -> str:
        if self.reference is not None:
            return f"{self.message} ({self.reference})"
        return self.message


class CompiledCss(BaseModel):
    """Successful compiler output plus the files it was built from."""

    model_config = ConfigDict(frozen=True)

    css: str
    dependencies: dict[str, str] = Field(default_factory=dict)
