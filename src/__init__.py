# src/__init__.py — v1
"""lesscache — cached LESS compilation with module-aware asset resolution."""

from lesscache.version import __version__

__all__ = ["__version__"]
