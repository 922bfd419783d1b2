# src/compiler/lesscpy_backend.py — v2
"""lesscpy backend (pure-Python LESS compiler).

Requires 'lesscpy' package: pip install lesscpy.
lesscpy has no source maps and no strict math mode; both options are
accepted, logged once and ignored.
"""

from __future__ import annotations

import io
import logging

from lesscache.compiler.base_backend import BackendError, BaseLessBackend
from lesscache.compiler.models import ParserOptions
from lesscache.compiler.variables import apply_variable_overrides

logger = logging.getLogger(__name__)

_UNSUPPORTED_OPTIONS = ("source_map", "strict_math")


class LesscpyBackend(BaseLessBackend):
    """Compile LESS with lesscpy."""

    def __init__(self, spaces: bool = True, tabs: bool = False) -> None:
        try:
            import lesscpy
        except ImportError as e:
            raise ImportError(
                "lesscpy package required: pip install lesscpy"
            ) from e

        self._lesscpy = lesscpy
        self._spaces = spaces
        self._tabs = tabs
        self._ignored_noted: set[str] = set()

    @property
    def name(self) -> str:
        return "lesscpy"

    def compile(
        self, source: str, overrides: dict[str, str], options: ParserOptions
    ) -> str:
        self._note_ignored(options)

        document = apply_variable_overrides(source, overrides)
        try:
            return self._lesscpy.compile(
                io.StringIO(document),
                minify=options.compress,
                tabs=self._tabs,
                spaces=self._spaces,
            )
        except Exception as exc:
            # lesscpy raises CompilationError, SyntaxError and assorted
            # evaluation errors; all of them mean the document did not compile.
            raise BackendError(str(exc) or exc.__class__.__name__) from exc

    def _note_ignored(self, options: ParserOptions) -> None:
        """Log once per option that is set but has no lesscpy equivalent."""
        for name in _UNSUPPORTED_OPTIONS:
            if getattr(options, name) and name not in self._ignored_noted:
                logger.info("lesscpy does not support %s; option ignored", name)
                self._ignored_noted.add(name)
