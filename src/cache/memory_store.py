# src/cache/memory_store.py — v2
"""In-process artifact store (CACHE_BACKEND=memory).

Artifacts live only as long as the process. Useful for long-running
servers that serve compiled CSS themselves, and for tests. CSS is kept per
artifact digest, as the file store does, so a replaced entry never changes
the text behind an already published URL.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from lesscache.cache.base_cache_store import BaseArtifactStore
from lesscache.cache.fingerprint import artifact_digest
from lesscache.cache.models import CachedArtifact


class MemoryArtifactStore(BaseArtifactStore):
    """Dictionary-backed artifact store."""

    def __init__(self, url_prefix: str = "/css", prefix: str = "lesscache_") -> None:
        self._url_prefix = url_prefix.rstrip("/")
        self._prefix = prefix
        self._entries: dict[str, CachedArtifact] = {}
        self._css: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CachedArtifact | None:
        with self._lock:
            return self._entries.get(key)

    def put(
        self,
        key: str,
        css: str,
        sources: list[str] | None = None,
        dependencies: dict[str, str] | None = None,
        backend: str = "",
    ) -> CachedArtifact:
        css_file = f"{self._prefix}{artifact_digest(key, dependencies)}.css"
        artifact = CachedArtifact(
            fingerprint=key,
            css_file=css_file,
            css_url=f"{self._url_prefix}/{css_file}",
            created_at=datetime.now(timezone.utc),
            sources=list(sources or []),
            dependencies=dict(dependencies or {}),
            backend=backend,
        )
        with self._lock:
            self._css.setdefault(css_file, css)
            self._entries[key] = artifact
        return artifact

    def read_css(self, artifact: CachedArtifact) -> str:
        with self._lock:
            css = self._css.get(artifact.css_file)
        if css is None:
            raise KeyError(artifact.css_file)
        return css

    def delete(self, key: str) -> None:
        with self._lock:
            artifact = self._entries.pop(key, None)
            if artifact is not None:
                self._css.pop(artifact.css_file, None)

    def list_entries(self) -> list[CachedArtifact]:
        with self._lock:
            return list(self._entries.values())

    def purge(self) -> int:
        removed = super().purge()
        with self._lock:
            self._css.clear()
        return removed
