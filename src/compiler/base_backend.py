# src/compiler/base_backend.py — v1
"""Abstract LESS backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lesscache.compiler.models import ParserOptions


class BackendError(Exception):
    """Raised by a backend when the LESS source cannot be compiled."""


class BaseLessBackend(ABC):
    """Unified interface for LESS-to-CSS compilers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g. 'lesscpy')."""

    @abstractmethod
    def compile(
        self, source: str, overrides: dict[str, str], options: ParserOptions
    ) -> str:
        """Compile an assembled LESS document to CSS.

        Args:
            source: Every source of the request, imports already expanded.
            overrides: Variable overrides, applied after the whole source.
            options: Effective parser options.

        Returns:
            CSS text.

        Raises:
            BackendError: On any parse or evaluation failure.
        """
