# src/fallback/options.py — v1
"""Effective render options: caller options merged over configured defaults."""

from __future__ import annotations

from typing import Any

from lesscache.compiler.models import effective_parser_options
from lesscache.fallback.models import RenderOptions


def resolve_render_options(
    options: RenderOptions | dict[str, Any] | None,
    *,
    debug: bool,
    cache_enabled: bool,
    compress: bool,
    less_js_url: str,
    less_js_env: str = "production",
) -> RenderOptions:
    """Fill every default a render call depends on.

    Args:
        options: Caller options (model, plain dict or None).
        debug: Debug flag; decides the source map default.
        cache_enabled: Default for ``cache``.
        compress: Default for ``parser.compress`` when the caller gave none.
        less_js_url: Default URL of the client-side compiler script.
        less_js_env: Default client-side environment.

    Returns:
        A RenderOptions with no unset defaults left.
    """
    if options is None:
        options = RenderOptions()
    elif isinstance(options, dict):
        options = RenderOptions(**options)

    parser = options.parser
    if "compress" not in parser.model_fields_set:
        parser = parser.model_copy(update={"compress": compress})
    parser = effective_parser_options(parser, debug)

    js = {"env": less_js_env, **options.js}

    return options.model_copy(update={
        "cache": cache_enabled if options.cache is None else options.cache,
        "parser": parser,
        "js": js,
        "less_js_url": options.less_js_url or less_js_url,
    })
