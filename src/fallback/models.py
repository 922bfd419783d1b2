# src/fallback/models.py — v1
"""Render domain models: RenderState, RenderOptions, RenderResult."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lesscache.cache.models import CompiledOutput
from lesscache.compiler.models import CompileError, ParserOptions


class RenderState(str, Enum):
    """Terminal state of one render call."""

    COMPILED = "compiled"
    DEGRADED_FALLBACK = "degraded_fallback"
    CLIENT_SIDE = "client_side"


class RenderOptions(BaseModel):
    """Per-call render options.

    ``cache`` None means "use the configured default"; ``js`` is passed to
    the client-side compiler as its configuration object.
    """

    model_config = ConfigDict(extra="forbid")

    cache: bool | None = None
    tag: bool = True
    parser: ParserOptions = Field(default_factory=ParserOptions)
    js: dict[str, Any] = Field(default_factory=dict)
    less_js_url: str | None = None


class RenderResult(BaseModel):
    """What the caller embeds in its page."""

    state: RenderState
    html: str
    css: str | None = None
    output: CompiledOutput | None = None
    error: CompileError | None = None

    @property
    def degraded(self) -> bool:
        return self.state is RenderState.DEGRADED_FALLBACK
