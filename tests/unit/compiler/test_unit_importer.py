# tests/unit/compiler/test_unit_importer.py — v1
"""Tests for compiler/importer.py — @import inlining."""

from __future__ import annotations

import hashlib

import pytest

from lesscache.compiler.import_resolver import AssetImportResolver, NullImportResolver
from lesscache.compiler.importer import ImportExpansionError, ImportInliner
from lesscache.compiler.models import ParserOptions


@pytest.fixture
def inliner(resolver):
    return ImportInliner(AssetImportResolver(resolver))


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class TestExpand:
    def test_relative_import_without_extension(self, inliner, resolver, webroot):
        out = inliner.expand(resolver.resolve_raw("less/main.less"))
        assert "@gutter: 10px;" in out
        assert "@import" not in out
        assert ".box { margin: @gutter; }" in out

    def test_dependencies_recorded(self, inliner, resolver, webroot):
        inliner.expand(resolver.resolve_raw("less/main.less"))
        vars_path = (webroot / "less" / "vars.less").resolve()
        assert str(vars_path) in inliner.dependencies
        assert inliner.dependencies[str(vars_path)] == hashlib.sha256(
            vars_path.read_bytes()
        ).hexdigest()
        assert len(inliner.dependencies) == 2

    def test_import_once(self, inliner, resolver, webroot):
        _write(webroot / "twice.less", '@import "less/vars";\n@import "less/vars.less";\n')
        out = inliner.expand(resolver.resolve_raw("twice.less"))
        assert out.count("@gutter") == 1

    def test_import_multiple(self, inliner, resolver, webroot):
        _write(webroot / "twice.less", '@import (multiple) "less/vars";\n@import (multiple) "less/vars";\n')
        out = inliner.expand(resolver.resolve_raw("twice.less"))
        assert out.count("@gutter") == 2

    def test_missing_import(self, inliner, resolver, webroot):
        _write(webroot / "bad.less", '@import "nope";\n')
        with pytest.raises(ImportExpansionError) as exc_info:
            inliner.expand(resolver.resolve_raw("bad.less"))
        assert exc_info.value.error.kind == "import"
        assert "nope" in exc_info.value.error.message

    def test_optional_missing_import(self, inliner, resolver, webroot):
        _write(webroot / "opt.less", '@import (optional) "nope";\n.a { b: c; }\n')
        out = inliner.expand(resolver.resolve_raw("opt.less"))
        assert ".a { b: c; }" in out
        assert "@import" not in out

    def test_unknown_option(self, inliner, resolver, webroot):
        _write(webroot / "ref.less", '@import (reference) "less/vars";\n')
        with pytest.raises(ImportExpansionError, match="reference"):
            inliner.expand(resolver.resolve_raw("ref.less"))

    def test_css_import_left_in_place(self, inliner, resolver, webroot):
        _write(webroot / "css_imp.less", '@import "reset.css";\n@import url(fonts.css);\n')
        out = inliner.expand(resolver.resolve_raw("css_imp.less"))
        assert '@import "reset.css";' in out
        assert "@import url(fonts.css);" in out

    def test_inline_option(self, inliner, resolver, webroot):
        _write(webroot / "raw.css", ".raw { x: @notless; }")
        _write(webroot / "inl.less", '@import (inline) "raw.css";\n')
        out = inliner.expand(resolver.resolve_raw("inl.less"))
        assert ".raw { x: @notless; }" in out

    def test_media_query_wrapped(self, inliner, resolver, webroot):
        _write(webroot / "media.less", '@import "less/vars" screen;\n')
        out = inliner.expand(resolver.resolve_raw("media.less"))
        assert out.startswith("@media screen {")

    def test_commented_import_ignored(self, inliner, resolver, webroot):
        _write(webroot / "cmt.less", '// @import "nope";\n/* @import "nope2"; */\n.a{}\n')
        out = inliner.expand(resolver.resolve_raw("cmt.less"))
        assert '// @import "nope";' in out

    def test_self_import_once(self, inliner, resolver, webroot):
        _write(webroot / "self.less", '@import "self";\n.a{}\n')
        out = inliner.expand(resolver.resolve_raw("self.less"))
        assert out.strip() == ".a{}"

    def test_depth_limit(self, resolver, webroot):
        _write(webroot / "loop.less", '@import (multiple) "loop";\n')
        inliner = ImportInliner(AssetImportResolver(resolver), max_depth=4)
        with pytest.raises(ImportExpansionError, match="deeper than 4"):
            inliner.expand(resolver.resolve_raw("loop.less"))


class TestModules:
    def test_cross_module_import(self, inliner, resolver, webroot):
        _write(webroot / "site.less", '@import "blog/theme.less";\n')
        out = inliner.expand(resolver.resolve_raw("site.less"))
        assert "@accent: blue;" in out

    def test_cross_module_requires_resolver(self, resolver, webroot):
        _write(webroot / "site.less", '@import "blog/theme.less";\n')
        inliner = ImportInliner(NullImportResolver())
        with pytest.raises(ImportExpansionError):
            inliner.expand(resolver.resolve_raw("site.less"))

    def test_relative_urls_rewritten(self, inliner, resolver):
        out = inliner.expand(resolver.resolve_raw("Blog.less/layout.less"))
        assert "url(http://example.test/blog/less/img/hero.png)" in out

    def test_relative_urls_disabled(self, resolver):
        inliner = ImportInliner(
            AssetImportResolver(resolver), options=ParserOptions(relative_urls=False)
        )
        out = inliner.expand(resolver.resolve_raw("Blog.less/layout.less"))
        assert "url(img/hero.png)" in out

    def test_absolute_urls_untouched(self, inliner, resolver, blog_root):
        _write(blog_root / "abs.less", ".a { background: url('/img/x.png'); }\n.b { background: url(data:image/png;base64,AA); }\n")
        out = inliner.expand(resolver.resolve_raw("blog/abs.less"))
        assert "url('/img/x.png')" in out
        assert "url(data:image/png;base64,AA)" in out

    def test_bare_sources_keep_urls(self, inliner, resolver, webroot):
        _write(webroot / "u.less", ".a { background: url(img/a.png); }\n")
        out = inliner.expand(resolver.resolve_raw("u.less"))
        assert "url(img/a.png)" in out
