# src/compiler/import_resolver.py — v1
"""Import resolution seam between the compiler and the asset resolver."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lesscache.assets.models import ResolvedAsset
from lesscache.assets.resolver import AssetResolver


class ImportResolver(ABC):
    """Resolves ``@import`` targets the compiler could not find on its own."""

    @abstractmethod
    def resolve_import(self, path: str, importer: ResolvedAsset) -> ResolvedAsset | None:
        """Return the imported asset, or None when it cannot be found."""


class AssetImportResolver(ImportResolver):
    """Delegates to an AssetResolver so imports can cross module boundaries."""

    def __init__(self, resolver: AssetResolver) -> None:
        self._resolver = resolver

    def resolve_import(self, path: str, importer: ResolvedAsset) -> ResolvedAsset | None:
        return self._resolver.resolve_import(path, importer)


class NullImportResolver(ImportResolver):
    """Resolves nothing; only relative imports work."""

    def resolve_import(self, path: str, importer: ResolvedAsset) -> ResolvedAsset | None:
        return None
