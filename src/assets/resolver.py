# src/assets/resolver.py — v1
"""Asset resolver — maps references to canonical filesystem paths and base URLs.

The resolver holds no state of its own: every answer is a function of the
module registry and the filesystem at call time.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath

from lesscache.assets.models import (
    AssetReference,
    ModuleRoot,
    ResolutionFailure,
    ResolvedAsset,
)
from lesscache.assets.reference import normalize_path, parse_reference, split_first_segment
from lesscache.assets.registry import ModuleRegistry, canonical_module_name

logger = logging.getLogger(__name__)


class AssetResolver:
    """Resolve stylesheet references against the webroot and module roots."""

    def __init__(
        self,
        webroot: Path | str,
        registry: ModuleRegistry | None = None,
        base_url: str = "",
        delimiter: str = ".",
    ) -> None:
        self._webroot = Path(webroot).expanduser()
        self._registry = registry or ModuleRegistry()
        self._base_url = base_url.rstrip("/")
        self._delimiter = delimiter

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def webroot(self) -> Path:
        return self._webroot

    def parse(self, raw: str) -> AssetReference:
        """Parse a raw reference with this resolver's registry and delimiter."""
        return parse_reference(raw, self._registry, self._delimiter)

    def resolve(self, reference: AssetReference) -> ResolvedAsset | ResolutionFailure:
        """Resolve a reference to an existing file.

        Args:
            reference: Parsed reference.

        Returns:
            ResolvedAsset with a canonical absolute path, or a ResolutionFailure
            of kind ``file_not_found`` / ``module_not_found``.
        """
        if reference.kind == "module":
            module = self._registry.lookup(reference.module_name or "")
            if module is None:
                return ResolutionFailure(
                    kind="module_not_found",
                    message=f"Module '{reference.module_name}' is not registered",
                    reference=reference,
                )
            return self._resolve_in_module(module, reference)

        path = _canonical_file(self._webroot, reference.raw_path)
        if path is not None:
            return ResolvedAsset(absolute_path=path, public_base_url="", reference=reference)

        head, tail = split_first_segment(reference.raw_path)
        if head and tail and head not in (".", "..") and not (self._webroot / head).is_dir():
            return ResolutionFailure(
                kind="module_not_found",
                message=f"Module '{canonical_module_name(head)}' is not registered",
                reference=reference,
            )
        return ResolutionFailure(
            kind="file_not_found",
            message=f"File not found: {reference.raw_path} under {self._webroot}",
            reference=reference,
        )

    def resolve_raw(self, raw: str) -> ResolvedAsset | ResolutionFailure:
        """Parse then resolve.

        A module reference whose file does not exist in the module falls back
        to the whole text as a webroot path, so registering module ``theme``
        does not hide an existing ``webroot/theme.less``. The module failure
        is reported when the webroot has no such file either.

        Raises:
            ValueError: If ``raw`` is empty.
        """
        reference = self.parse(raw)
        result = self.resolve(reference)
        if (
            isinstance(result, ResolutionFailure)
            and reference.kind == "module"
            and result.kind == "file_not_found"
        ):
            bare = AssetReference.bare(normalize_path(raw))
            path = _canonical_file(self._webroot, bare.raw_path)
            if path is not None:
                logger.debug("%s not in module '%s', using webroot file", raw, reference.module_name)
                return ResolvedAsset(absolute_path=path, public_base_url="", reference=bare)
        return result

    def resolve_import(self, path: str, importer: ResolvedAsset) -> ResolvedAsset | None:
        """Resolve an ``@import`` target through the module registry.

        Only path notation is tried here; relative lookups next to the
        importing file happen before the compiler gets this far.
        """
        head, tail = split_first_segment(normalize_path(path))
        if not head or not tail:
            return None
        module = self._registry.lookup(head)
        if module is None:
            return None
        reference = AssetReference.qualified(module.name, tail)
        result = self._resolve_in_module(module, reference)
        if isinstance(result, ResolutionFailure):
            logger.debug("Import %s from %s not found: %s", path, importer.absolute_path, result.message)
            return None
        return result

    def public_url(self, reference: AssetReference) -> str:
        """Browser-facing URL of the source file itself."""
        if reference.kind == "module":
            module = self._registry.lookup(reference.module_name or "")
            prefix = module.url_prefix if module is not None else f"/{reference.module_name}"
            return f"{self._base_url}{prefix}/{reference.raw_path}"
        return f"{self._base_url}/{reference.raw_path}"

    def _resolve_in_module(
        self, module: ModuleRoot, reference: AssetReference
    ) -> ResolvedAsset | ResolutionFailure:
        path = _canonical_file(module.root, reference.raw_path)
        if path is None:
            return ResolutionFailure(
                kind="file_not_found",
                message=f"File not found: {reference.raw_path} in module '{module.name}'",
                reference=reference,
            )
        return ResolvedAsset(
            absolute_path=path,
            public_base_url=self._module_base_url(module, reference.raw_path),
            reference=reference,
        )

    def _module_base_url(self, module: ModuleRoot, raw_path: str) -> str:
        subdir = str(PurePosixPath(raw_path).parent)
        suffix = f"/{subdir}" if subdir not in ("", ".") else ""
        return f"{self._base_url}{module.url_prefix}{suffix}"


def _canonical_file(root: Path, raw_path: str) -> Path | None:
    """Join ``raw_path`` onto ``root`` and canonicalize it.

    Returns None when the file does not exist or when the lexically normalized
    path leaves ``root``. Symlinks are followed after that check.
    """
    if not raw_path:
        return None
    lexical = os.path.normpath(os.path.join(os.path.abspath(root), raw_path))
    if os.path.commonpath([lexical, os.path.abspath(root)]) != os.path.abspath(root):
        logger.debug("Rejected %s: escapes %s", raw_path, root)
        return None
    try:
        resolved = Path(lexical).resolve(strict=True)
    except (OSError, RuntimeError):
        return None
    if not resolved.is_file():
        return None
    return resolved
