# src/compiler/compiler.py — v2
"""Compiler adapter — turns a CompileRequest into CSS through a LESS backend.

Order of work for one request:
    1. expand every source (imports inlined) in request order
    2. join them into one document
    3. hand the document plus variable overrides to the backend

Overrides reach the backend only after step 2, so they override the
sources' defaults instead of seeding them.
"""

from __future__ import annotations

import logging

from lesscache.assets.models import ResolvedAsset
from lesscache.compiler.base_backend import BackendError, BaseLessBackend
from lesscache.compiler.import_resolver import ImportResolver, NullImportResolver
from lesscache.compiler.importer import ImportExpansionError, ImportInliner
from lesscache.compiler.models import CompiledCss, CompileError, CompileRequest

logger = logging.getLogger(__name__)


class LessCompiler:
    """Compile requests with an injected backend and import resolver."""

    def __init__(
        self,
        backend: BaseLessBackend,
        import_resolver: ImportResolver | None = None,
        max_import_depth: int = 32,
    ) -> None:
        self._backend = backend
        self._import_resolver = import_resolver or NullImportResolver()
        self._max_import_depth = max_import_depth

    @property
    def backend(self) -> BaseLessBackend:
        return self._backend

    def compile(self, request: CompileRequest) -> CompiledCss | CompileError:
        """Compile every source of ``request`` into one stylesheet.

        Returns:
            CompiledCss on success. On any failure a CompileError naming the
            offending reference; no partial CSS is ever returned.
        """
        if not request.sources:
            return CompileError(kind="parse", message="No stylesheet sources given")

        inliner = ImportInliner(
            self._import_resolver,
            options=request.parser_options,
            max_depth=self._max_import_depth,
        )
        documents: list[str] = []
        for source in request.sources:
            try:
                documents.append(inliner.expand(source))
            except ImportExpansionError as exc:
                logger.debug("Import expansion failed for %s: %s", source.reference, exc)
                return exc.error

        try:
            css = self._backend.compile(
                "\n".join(documents),
                request.variable_overrides,
                request.parser_options,
            )
        except BackendError as exc:
            return CompileError(
                kind="parse",
                message=str(exc),
                reference=self._failing_source(request, documents).reference,
            )

        logger.debug(
            "Compiled %d source(s) with %s (%d files read)",
            len(request.sources), self._backend.name, len(inliner.dependencies),
        )
        return CompiledCss(css=css, dependencies=dict(inliner.dependencies))

    def _failing_source(self, request: CompileRequest, documents: list[str]) -> ResolvedAsset:
        """First source whose addition makes the document fail to compile.

        Prefixes are compiled rather than single sources, so a source that
        relies on variables or mixins from an earlier one is not blamed.
        """
        for index in range(len(documents) - 1):
            try:
                self._backend.compile(
                    "\n".join(documents[:index + 1]),
                    request.variable_overrides,
                    request.parser_options,
                )
            except BackendError:
                return request.sources[index]
        return request.sources[-1]
