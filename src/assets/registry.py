# src/assets/registry.py — v1
"""Module registry — maps module names to their asset roots and URL prefixes.

Names are canonicalized on the way in and on lookup, so ``Blog``, ``blog``
and ``BLOG`` all address the same module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lesscache.assets.models import ModuleRoot

if TYPE_CHECKING:
    from lesscache.config.settings import Settings

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when a module lookup or registration fails."""


def canonical_module_name(name: str) -> str:
    """Canonical form of a module name: stripped, lowercase, ``-`` -> ``_``."""
    return name.strip().lower().replace("-", "_")


class ModuleRegistry:
    """Registry of modules that ship their own stylesheet assets."""

    def __init__(self) -> None:
        self._modules: dict[str, ModuleRoot] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> ModuleRegistry:
        """Build a registry from ``module_asset_roots`` / ``module_url_prefixes``."""
        registry = cls()
        prefixes = {
            canonical_module_name(k): v for k, v in settings.module_url_prefixes.items()
        }
        for name, root in settings.module_asset_roots.items():
            registry.register(name, root, url_prefix=prefixes.get(canonical_module_name(name)))
        return registry

    @property
    def names(self) -> list[str]:
        """Return sorted list of registered (canonical) module names."""
        return sorted(self._modules.keys())

    def register(
        self, name: str, root: Path | str, url_prefix: str | None = None
    ) -> ModuleRoot:
        """Register a module asset root.

        Args:
            name: Module name in any casing.
            root: Filesystem directory holding the module's public assets.
            url_prefix: Public URL prefix. Defaults to ``/<canonical name>``.

        Returns:
            The registered ModuleRoot.
        """
        canonical = canonical_module_name(name)
        if not canonical or "/" in canonical:
            raise RegistryError(f"Invalid module name: {name!r}")
        prefix = url_prefix if url_prefix is not None else f"/{canonical}"
        module = ModuleRoot(
            name=canonical,
            root=Path(root).expanduser(),
            url_prefix="/" + prefix.strip("/") if prefix.strip("/") else "",
        )
        if canonical in self._modules:
            logger.warning("Overwriting existing module: %s", canonical)
        self._modules[canonical] = module
        logger.debug("Registered module %s at %s", canonical, module.root)
        return module

    def lookup(self, name: str) -> ModuleRoot | None:
        """Get a module by name, or None if not registered."""
        return self._modules.get(canonical_module_name(name))

    def get_or_raise(self, name: str) -> ModuleRoot:
        """Get a module by name, raise if not found."""
        module = self.lookup(name)
        if module is None:
            raise RegistryError(f"Module '{name}' not found in registry")
        return module

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None
