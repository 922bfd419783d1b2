# src/cache/cache_factory.py — v3
"""Factory for artifact store instantiation."""

from __future__ import annotations

from lesscache.cache.base_cache_store import BaseArtifactStore
from lesscache.config.settings import Settings


def create_artifact_store(settings: Settings | None = None) -> BaseArtifactStore:
    """Instantiate the configured artifact store.

    Args:
        settings: Application settings. Defaults to the file backend under
            ``webroot/css``.

    Returns:
        Configured BaseArtifactStore implementation.
    """
    settings = settings or Settings()
    url_prefix = f"{settings.base_url.rstrip('/')}/{settings.css_dir.strip('/')}"

    if settings.cache_backend == "file":
        from lesscache.cache.file_store import FileArtifactStore
        return FileArtifactStore(
            cache_root=settings.cache_dir,
            url_prefix=url_prefix,
            prefix=settings.artifact_prefix,
        )

    if settings.cache_backend == "memory":
        from lesscache.cache.memory_store import MemoryArtifactStore
        return MemoryArtifactStore(url_prefix=url_prefix, prefix=settings.artifact_prefix)

    raise ValueError(f"Unsupported cache backend: {settings.cache_backend!r}")
