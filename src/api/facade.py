# src/api/facade.py — v2
"""Public API facade — wire the pipeline from Settings and run it.

Usage:
    from lesscache.api.facade import render_stylesheets
    result = render_stylesheets(["styles.less", "Blog.theme.less"])
    head_html = result.html
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lesscache.api.models import Pipeline
from lesscache.assets.registry import ModuleRegistry
from lesscache.assets.resolver import AssetResolver
from lesscache.cache.cache_factory import create_artifact_store
from lesscache.cache.compile_cache import CompileCache
from lesscache.compiler.compiler import LessCompiler
from lesscache.compiler.import_resolver import AssetImportResolver
from lesscache.compiler.models import CompileError
from lesscache.config.settings import Settings
from lesscache.fallback.orchestrator import FallbackOrchestrator

if TYPE_CHECKING:
    from lesscache.cache.base_cache_store import BaseArtifactStore
    from lesscache.cache.models import CompiledOutput
    from lesscache.compiler.base_backend import BaseLessBackend
    from lesscache.compiler.models import ParserOptions
    from lesscache.fallback.models import RenderOptions, RenderResult

logger = logging.getLogger(__name__)


def build_pipeline(
    settings: Settings | None = None,
    backend: BaseLessBackend | None = None,
    store: BaseArtifactStore | None = None,
) -> Pipeline:
    """Construct every component from settings.

    Args:
        settings: Configuration. Loaded from the environment if None.
        backend: LESS backend. Defaults to lesscpy.
        store: Artifact store. Defaults to the configured backend.

    Returns:
        Pipeline holding the wired components.
    """
    settings = settings or Settings()
    if backend is None:
        from lesscache.compiler.lesscpy_backend import LesscpyBackend
        backend = LesscpyBackend()

    resolver = AssetResolver(
        webroot=settings.webroot,
        registry=ModuleRegistry.from_settings(settings),
        base_url=settings.base_url,
        delimiter=settings.namespace_delimiter,
    )
    compiler = LessCompiler(
        backend,
        import_resolver=AssetImportResolver(resolver),
        max_import_depth=settings.max_import_depth,
    )
    cache = CompileCache(compiler, store or create_artifact_store(settings))
    orchestrator = FallbackOrchestrator(
        resolver,
        cache,
        debug=settings.debug,
        cache_enabled=settings.cache_enabled,
        compress=settings.compress,
        less_js_url=settings.less_js_url,
        less_js_env=settings.less_js_env,
    )
    logger.debug(
        "Pipeline ready: webroot=%s, modules=%s, backend=%s",
        settings.webroot, resolver.registry.names, backend.name,
    )
    return Pipeline(
        settings=settings,
        resolver=resolver,
        compiler=compiler,
        cache=cache,
        orchestrator=orchestrator,
    )


def render_stylesheets(
    references: str | list[str],
    options: RenderOptions | dict[str, Any] | None = None,
    variable_overrides: dict[str, str] | None = None,
    settings: Settings | None = None,
    backend: BaseLessBackend | None = None,
) -> RenderResult:
    """Render references to HTML, falling back to client-side compilation."""
    pipeline = build_pipeline(settings, backend)
    return pipeline.orchestrator.render(references, options, variable_overrides)


def compile_stylesheets(
    references: str | list[str],
    variable_overrides: dict[str, str] | None = None,
    use_cache: bool | None = None,
    parser_options: ParserOptions | dict[str, Any] | None = None,
    settings: Settings | None = None,
    backend: BaseLessBackend | None = None,
) -> CompiledOutput | CompileError:
    """Compile references without any HTML or fallback handling.

    Returns:
        CompiledOutput, or the CompileError describing why it failed.
    """
    pipeline = build_pipeline(settings, backend)
    refs = [references] if isinstance(references, str) else list(references)
    opts = pipeline.orchestrator.resolve_options(
        {"cache": use_cache, "parser": parser_options or {}}
    )
    request = pipeline.orchestrator.build_request(refs, opts, variable_overrides)
    if isinstance(request, CompileError):
        return request
    return pipeline.cache.get_or_compile(request, use_cache=bool(opts.cache))
