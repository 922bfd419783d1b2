# src/cache/compile_cache.py — v2
"""Compile cache — fingerprint lookup in front of the compiler.

Flow for ``get_or_compile(request, use_cache=True)``:
    1. compute the request fingerprint
    2. take the per-fingerprint lock
    3. stored artifact with unchanged dependencies -> hit, no compile
    4. otherwise compile, persist atomically, return the new artifact
       (stored under a name covering every imported file, so a stale
       entry is replaced by a new file, never rewritten)

Only one thread of a process compiles a given fingerprint at a time; a
fingerprint's lock is dropped once nobody holds or awaits it.
Several processes sharing a cache directory may still compile the same
fingerprint twice; the atomic store keeps every visible file complete.
Subclasses needing cross-process exclusion override ``_fingerprint_lock``
(e.g. with a lock file in the cache directory).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from lesscache.cache.base_cache_store import BaseArtifactStore, CacheWriteError
from lesscache.cache.fingerprint import compute_fingerprint, dependencies_unchanged
from lesscache.cache.models import CachedArtifact, CompiledOutput, Fingerprint
from lesscache.compiler.compiler import LessCompiler
from lesscache.compiler.models import CompiledCss, CompileError, CompileRequest
from lesscache.logging.context import set_fingerprint_context

logger = logging.getLogger(__name__)


class CompileCache:
    """Content-addressed cache of compiled stylesheets."""

    def __init__(self, compiler: LessCompiler, store: BaseArtifactStore | None = None) -> None:
        self._compiler = compiler
        self._store = store
        self._locks: dict[str, _LockSlot] = {}
        self._locks_guard = threading.Lock()

    @property
    def store(self) -> BaseArtifactStore | None:
        return self._store

    def get_or_compile(
        self, request: CompileRequest, use_cache: bool = True
    ) -> CompiledOutput | CompileError:
        """Return cached output for ``request`` or compile it.

        Args:
            request: Resolved compile request.
            use_cache: False compiles unconditionally and returns inline CSS
                without reading or writing the store.

        Returns:
            CompiledOutput (inline CSS or a stored artifact), or the
            CompileError produced by the compiler, unchanged.
        """
        try:
            fingerprint = compute_fingerprint(request)
        except OSError as exc:
            return CompileError(
                kind="import",
                message=f"Cannot read source: {exc}",
                reference=request.sources[0].reference if len(request.sources) == 1 else None,
            )
        set_fingerprint_context(fingerprint.key)

        if not use_cache or self._store is None:
            result = self._compiler.compile(request)
            if isinstance(result, CompileError):
                return result
            return CompiledOutput(fingerprint=fingerprint, css=result.css)

        with self._fingerprint_lock(fingerprint.key):
            artifact = self._lookup(fingerprint.key)
            if artifact is not None:
                logger.debug("Cache hit: %s", fingerprint.key)
                return CompiledOutput(fingerprint=fingerprint, artifact=artifact, cache_hit=True)

            logger.debug("Cache miss: %s", fingerprint.key)
            result = self._compiler.compile(request)
            if isinstance(result, CompileError):
                return result
            return self._persist(fingerprint, request, result)

    def read_css(self, output: CompiledOutput) -> str:
        """CSS text of an output, whether inline or stored."""
        if output.css is not None:
            return output.css
        if output.artifact is None or self._store is None:
            raise ValueError("Output holds neither inline CSS nor a stored artifact")
        return self._store.read_css(output.artifact)

    def _lookup(self, key: str) -> CachedArtifact | None:
        assert self._store is not None
        artifact = self._store.get(key)
        if artifact is None:
            return None
        if not dependencies_unchanged(artifact.dependencies):
            logger.info("Cache entry %s is stale: an imported file changed", key)
            return None
        return artifact

    def _persist(
        self, fingerprint: Fingerprint, request: CompileRequest, result: CompiledCss
    ) -> CompiledOutput:
        assert self._store is not None
        try:
            artifact = self._store.put(
                fingerprint.key,
                result.css,
                sources=[str(src.absolute_path) for src in request.sources],
                dependencies=result.dependencies,
                backend=self._compiler.backend.name,
            )
        except CacheWriteError as exc:
            logger.warning("Serving inline CSS, cache write failed: %s", exc)
            return CompiledOutput(fingerprint=fingerprint, css=result.css)
        logger.info("Compiled and cached %s", artifact.css_file)
        return CompiledOutput(fingerprint=fingerprint, artifact=artifact)

    @contextmanager
    def _fingerprint_lock(self, key: str) -> Iterator[None]:
        with self._locks_guard:
            slot = self._locks.setdefault(key, _LockSlot())
            slot.waiters += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._locks_guard:
                slot.waiters -= 1
                if slot.waiters == 0:
                    del self._locks[key]


class _LockSlot:
    """A fingerprint lock plus the number of callers holding or awaiting it."""

    __slots__ = ("lock", "waiters")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.waiters = 0
