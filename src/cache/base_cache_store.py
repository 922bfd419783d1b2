# src/cache/base_cache_store.py — v2
"""Abstract artifact store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lesscache.cache.models import CachedArtifact


class CacheWriteError(Exception):
    """Raised when an artifact cannot be persisted."""


class BaseArtifactStore(ABC):
    """Unified interface for compiled-artifact storage backends."""

    @abstractmethod
    def get(self, key: str) -> CachedArtifact | None:
        """Retrieve an artifact by fingerprint key. Missing or corrupt -> None."""

    @abstractmethod
    def put(
        self,
        key: str,
        css: str,
        sources: list[str] | None = None,
        dependencies: dict[str, str] | None = None,
        backend: str = "",
    ) -> CachedArtifact:
        """Persist CSS and its metadata atomically, returning the new artifact.

        Raises:
            CacheWriteError: If the artifact cannot be written.
        """

    @abstractmethod
    def read_css(self, artifact: CachedArtifact) -> str:
        """Return the CSS text of a stored artifact."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an artifact."""

    @abstractmethod
    def list_entries(self) -> list[CachedArtifact]:
        """List all readable artifacts."""

    def purge(self) -> int:
        """Remove every artifact, returning how many were removed."""
        entries = self.list_entries()
        for entry in entries:
            self.delete(entry.fingerprint)
        return len(entries)
