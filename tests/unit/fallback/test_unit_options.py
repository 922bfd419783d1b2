# tests/unit/fallback/test_unit_options.py — v1
"""Tests for fallback/options.py — resolve_render_options."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lesscache.fallback.models import RenderOptions
from lesscache.fallback.options import resolve_render_options

DEFAULTS = dict(cache_enabled=True, compress=True, less_js_url="/less.js")


class TestResolveRenderOptions:
    def test_defaults(self):
        opts = resolve_render_options(None, debug=False, **DEFAULTS)
        assert opts.cache is True
        assert opts.tag is True
        assert opts.parser.compress is True
        assert opts.parser.source_map is False
        assert opts.js == {"env": "production"}
        assert opts.less_js_url == "/less.js"

    def test_debug_turns_on_source_map(self):
        opts = resolve_render_options({}, debug=True, **DEFAULTS)
        assert opts.parser.source_map is True

    def test_cache_default_from_settings(self):
        opts = resolve_render_options(None, debug=False, cache_enabled=False, compress=True, less_js_url="/l.js")
        assert opts.cache is False

    def test_caller_cache_wins(self):
        opts = resolve_render_options({"cache": False}, debug=False, **DEFAULTS)
        assert opts.cache is False

    def test_compress_default_from_settings(self):
        opts = resolve_render_options(None, debug=False, cache_enabled=True, compress=False, less_js_url="/l.js")
        assert opts.parser.compress is False

    def test_caller_compress_wins(self):
        opts = resolve_render_options(
            {"parser": {"compress": True}}, debug=False,
            cache_enabled=True, compress=False, less_js_url="/l.js",
        )
        assert opts.parser.compress is True

    def test_js_options_merged(self):
        opts = resolve_render_options({"js": {"async": True}}, debug=False, **DEFAULTS)
        assert opts.js == {"env": "production", "async": True}

    def test_caller_js_env_wins(self):
        opts = resolve_render_options({"js": {"env": "development"}}, debug=False, **DEFAULTS)
        assert opts.js["env"] == "development"

    def test_model_accepted(self):
        opts = resolve_render_options(RenderOptions(tag=False), debug=False, **DEFAULTS)
        assert opts.tag is False

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            resolve_render_options({"bogus": 1}, debug=False, **DEFAULTS)
