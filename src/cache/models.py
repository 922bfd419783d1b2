# src/cache/models.py — v2
"""Cache domain models: Fingerprint, CachedArtifact, CompiledOutput."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SourceDigest(BaseModel):
    """One source file as it contributed to a fingerprint."""

    model_config = ConfigDict(frozen=True)

    path: str
    sha256: str


class Fingerprint(BaseModel):
    """Deterministic digest of a compile request's inputs."""

    model_config = ConfigDict(frozen=True)

    key: str
    sources: tuple[SourceDigest, ...] = ()

    def __str__(self) -> str:
        return self.key


class CachedArtifact(BaseModel):
    """A compiled stylesheet persisted in the cache directory. Never mutated."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    css_file: str
    css_url: str
    created_at: datetime
    sources: list[str] = Field(default_factory=list)
    dependencies: dict[str, str] = Field(default_factory=dict)
    backend: str = ""


class CompiledOutput(BaseModel):
    """Result of a successful get_or_compile call.

    Exactly one of ``css`` (inline text) and ``artifact`` (stored file) is set.
    """

    model_config = ConfigDict(frozen=True)

    fingerprint: Fingerprint
    css: str | None = None
    artifact: CachedArtifact | None = None
    cache_hit: bool = False

    @property
    def is_inline(self) -> bool:
        return self.artifact is None
