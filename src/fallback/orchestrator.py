# src/fallback/orchestrator.py — v1
"""Fallback orchestrator — render stylesheets, degrading to client-side compilation.

Usage:
    orchestrator = FallbackOrchestrator(resolver, compile_cache, debug=False)
    result = orchestrator.render(["styles.less", "Blog.theme.less"])
    page_head += result.html

States:
    compiled           CSS produced (link to cached file, inline block or raw text)
    degraded_fallback  resolution or compilation failed; the browser compiles
    client_side        caller asked for the development client environment
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from lesscache.assets.models import ResolutionFailure, ResolvedAsset
from lesscache.assets.resolver import AssetResolver
from lesscache.cache.compile_cache import CompileCache
from lesscache.cache.models import CompiledOutput
from lesscache.compiler.models import CompileError, CompileRequest
from lesscache.fallback.html import client_side_block, style_block, stylesheet_link
from lesscache.fallback.models import RenderOptions, RenderResult, RenderState
from lesscache.fallback.options import resolve_render_options
from lesscache.logging.context import set_render_context

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """Drive resolution, caching and compilation for one render call at a time.

    Debug and cache defaults are passed in explicitly; nothing here reads
    process-wide configuration.
    """

    def __init__(
        self,
        resolver: AssetResolver,
        compile_cache: CompileCache,
        *,
        debug: bool = False,
        cache_enabled: bool = True,
        compress: bool = True,
        less_js_url: str = "/less/js/less.min.js",
        less_js_env: str = "production",
    ) -> None:
        self._resolver = resolver
        self._cache = compile_cache
        self._debug = debug
        self._cache_enabled = cache_enabled
        self._compress = compress
        self._less_js_url = less_js_url
        self._less_js_env = less_js_env
        self.last_error: CompileError | None = None

    @property
    def debug(self) -> bool:
        return self._debug

    def resolve_options(self, options: RenderOptions | dict[str, Any] | None) -> RenderOptions:
        """Caller options merged over this orchestrator's defaults."""
        return resolve_render_options(
            options,
            debug=self._debug,
            cache_enabled=self._cache_enabled,
            compress=self._compress,
            less_js_url=self._less_js_url,
            less_js_env=self._less_js_env,
        )

    def render(
        self,
        references: str | list[str],
        options: RenderOptions | dict[str, Any] | None = None,
        variable_overrides: dict[str, str] | None = None,
    ) -> RenderResult:
        """Render one or more stylesheet references.

        Args:
            references: One reference or an ordered list of them.
            options: Render options (see RenderOptions).
            variable_overrides: LESS variables to override after all sources.

        Returns:
            RenderResult. Never raises for resolution or compile failures;
            those produce a ``degraded_fallback`` result.
        """
        refs = [references] if isinstance(references, str) else list(references)
        opts = self.resolve_options(options)
        set_render_context(uuid.uuid4().hex[:8], reference=", ".join(refs))

        if opts.js.get("env") == "development":
            logger.debug("Client-side environment requested, skipping compilation")
            return RenderResult(
                state=RenderState.CLIENT_SIDE,
                html=self._client_block(refs, opts, opts.js),
            )

        request = self.build_request(refs, opts, variable_overrides)
        if isinstance(request, CompileError):
            return self._degrade(refs, opts, request)

        result = self._cache.get_or_compile(request, use_cache=bool(opts.cache))
        if isinstance(result, CompileError):
            return self._degrade(refs, opts, result)

        return self._compiled(result, opts)

    def build_request(
        self,
        refs: list[str],
        opts: RenderOptions,
        variable_overrides: dict[str, str] | None = None,
    ) -> CompileRequest | CompileError:
        """Resolve every reference into a CompileRequest."""
        sources: list[ResolvedAsset] = []
        for raw in refs:
            try:
                resolved = self._resolver.resolve_raw(raw)
            except ValueError as exc:
                return CompileError(kind="resolution", message=str(exc))
            if isinstance(resolved, ResolutionFailure):
                return CompileError(
                    kind="resolution",
                    message=f"{resolved.kind}: {resolved.message}",
                    reference=resolved.reference,
                )
            sources.append(resolved)
        try:
            return CompileRequest(
                sources=tuple(sources),
                variable_overrides=variable_overrides or {},
                parser_options=opts.parser,
            )
        except ValueError as exc:
            return CompileError(kind="parse", message=f"Invalid variable overrides: {exc}")

    def _compiled(self, output: CompiledOutput, opts: RenderOptions) -> RenderResult:
        if output.artifact is not None:
            url = output.artifact.css_url
            html = stylesheet_link(url) if opts.tag else url
            return RenderResult(state=RenderState.COMPILED, html=html, output=output)

        css = output.css or ""
        html = style_block(css) if opts.tag else css
        return RenderResult(state=RenderState.COMPILED, html=html, css=css, output=output)

    def _degrade(
        self, refs: list[str], opts: RenderOptions, error: CompileError
    ) -> RenderResult:
        self.last_error = error
        logger.error("Error compiling less file: %s", error)

        js = dict(opts.js)
        js["env"] = "development" if self._debug else "production"
        return RenderResult(
            state=RenderState.DEGRADED_FALLBACK,
            html=self._client_block(refs, opts, js),
            error=error,
        )

    def _client_block(
        self, refs: list[str], opts: RenderOptions, js: dict[str, Any]
    ) -> str:
        hrefs = [self._href(raw) for raw in refs]
        return client_side_block(hrefs, js, opts.less_js_url or self._less_js_url)

    def _href(self, raw: str) -> str:
        if raw.startswith(("http://", "https://", "//")):
            return raw
        try:
            return self._resolver.public_url(self._resolver.parse(raw))
        except ValueError:
            return raw
