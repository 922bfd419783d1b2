# src/cache/file_store.py — v3
"""File-based artifact store (default backend).

Each entry is two files in the cache directory:

    <prefix><digest>.css   compiled stylesheet, served to browsers; named by
                           the artifact digest and never rewritten
    <prefix><key>.json     CachedArtifact metadata for the request key; points
                           at the current CSS file

Both are written to a temporary file in the same directory and moved into
place with os.replace, CSS first. The metadata file is the commit marker:
an entry without readable metadata, or whose CSS file is gone, is a miss.
Replacing a stale entry only moves the pointer; the previous CSS file stays
until the cache is purged.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from lesscache.cache.base_cache_store import BaseArtifactStore, CacheWriteError
from lesscache.cache.fingerprint import artifact_digest
from lesscache.cache.models import CachedArtifact

logger = logging.getLogger(__name__)


class FileArtifactStore(BaseArtifactStore):
    """Artifact store backed by a single cache directory."""

    def __init__(
        self,
        cache_root: Path | str,
        url_prefix: str = "/css",
        prefix: str = "lesscache_",
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._url_prefix = url_prefix.rstrip("/")
        self._prefix = prefix

    @property
    def root(self) -> Path:
        return self._root

    def css_file_name(self, digest: str) -> str:
        return f"{self._prefix}{_safe_key(digest)}.css"

    def css_url(self, digest: str) -> str:
        return f"{self._url_prefix}/{self.css_file_name(digest)}"

    def get(self, key: str) -> CachedArtifact | None:
        """Retrieve the current artifact of a request key."""
        artifact = self._read_meta(self._meta_path(key))
        if artifact is None:
            return None
        if artifact.fingerprint != key:
            logger.warning("Cache entry %s holds fingerprint %s", key, artifact.fingerprint)
            return None
        if not (self._root / artifact.css_file).is_file():
            logger.debug("Cache entry %s has no CSS file", key)
            return None
        return artifact

    def put(
        self,
        key: str,
        css: str,
        sources: list[str] | None = None,
        dependencies: dict[str, str] | None = None,
        backend: str = "",
    ) -> CachedArtifact:
        """Store CSS under its artifact digest and point ``key`` at it."""
        digest = artifact_digest(key, dependencies)
        artifact = CachedArtifact(
            fingerprint=key,
            css_file=self.css_file_name(digest),
            css_url=self.css_url(digest),
            created_at=datetime.now(timezone.utc),
            sources=list(sources or []),
            dependencies=dict(dependencies or {}),
            backend=backend,
        )
        css_path = self._root / artifact.css_file
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            if not css_path.is_file():
                _atomic_write(css_path, css)
            _atomic_write(self._meta_path(key), artifact.model_dump_json(indent=2))
        except OSError as e:
            raise CacheWriteError(f"Cannot write cache entry {key} to {self._root}: {e}") from e
        return artifact

    def read_css(self, artifact: CachedArtifact) -> str:
        return (self._root / artifact.css_file).read_text(encoding="utf-8")

    def delete(self, key: str) -> None:
        """Remove an entry (metadata first so readers never see half of one)."""
        meta = self._meta_path(key)
        artifact = self._read_meta(meta)
        if meta.exists():
            meta.unlink()
        if artifact is not None:
            css_path = self._root / artifact.css_file
            if css_path.exists():
                css_path.unlink()

    def list_entries(self) -> list[CachedArtifact]:
        """List all readable entries."""
        if not self._root.is_dir():
            return []
        entries = (self._read_meta(path) for path in sorted(self._root.glob(f"{self._prefix}*.json")))
        return [entry for entry in entries if entry is not None]

    def purge(self) -> int:
        """Remove every entry, plus CSS files left behind by replaced entries."""
        removed = super().purge()
        if self._root.is_dir():
            for orphan in self._root.glob(f"{self._prefix}*.css"):
                orphan.unlink()
        return removed

    def _meta_path(self, key: str) -> Path:
        return self._root / f"{self._prefix}{_safe_key(key)}.json"

    def _read_meta(self, path: Path) -> CachedArtifact | None:
        if not path.exists():
            return None
        try:
            return CachedArtifact(**json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None


def _safe_key(key: str) -> str:
    return key.replace("/", "_").replace("\\", "_")


def _atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temp file and rename."""
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp-", suffix=path.suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
