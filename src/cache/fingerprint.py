# src/cache/fingerprint.py — v4
"""Compile request fingerprinting.

Two digests are involved:

    request key      SHA-256 over canonical JSON of the ordered sources (path
                     and content hash), their base URLs, the parser options
                     and the sorted variable overrides. Computable before
                     compiling; used for lookup.
    artifact digest  SHA-256 over the request key plus every file the
                     compilation read. Names the stored CSS file.

Imported files are only known after compiling, so a stored artifact whose
dependencies no longer hash as recorded is stale and its replacement gets a
new artifact digest, hence a new file and URL.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from lesscache.cache.models import Fingerprint, SourceDigest
from lesscache.compiler.models import CompileRequest

FINGERPRINT_VERSION = 1


def compute_fingerprint(request: CompileRequest) -> Fingerprint:
    """Compute the cache key of a compile request.

    Args:
        request: Request with already-resolved sources.

    Returns:
        Fingerprint with the hex key and per-source digests.

    Raises:
        OSError: If a source file cannot be read.
    """
    digests = tuple(
        SourceDigest(path=str(src.absolute_path), sha256=file_sha256(src.absolute_path))
        for src in request.sources
    )
    payload = {
        "v": FINGERPRINT_VERSION,
        "sources": [[d.path, d.sha256] for d in digests],
        "base_urls": [src.public_base_url for src in request.sources],
        "options": request.parser_options.model_dump(mode="json"),
        "overrides": sorted(request.variable_overrides.items()),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    key = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return Fingerprint(key=key, sources=digests)


def file_sha256(path: Path | str, chunk_size: int = 65536) -> str:
    """SHA-256 of a file's bytes."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def dependencies_unchanged(dependencies: dict[str, str]) -> bool:
    """True when every recorded dependency still hashes the same."""
    for path, expected in dependencies.items():
        try:
            if file_sha256(path) != expected:
                return False
        except OSError:
            return False
    return True


def artifact_digest(key: str, dependencies: dict[str, str] | None = None) -> str:
    """Name of the compiled output: the request key plus its whole import closure.

    Two compilations with the same key but different imported file contents
    get different names, so a published CSS URL always serves one content.
    """
    payload = [key, sorted((dependencies or {}).items())]
    canonical = json.dumps(payload, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
