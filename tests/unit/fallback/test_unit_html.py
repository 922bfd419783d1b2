# tests/unit/fallback/test_unit_html.py — v1
"""Tests for fallback/html.py."""

from __future__ import annotations

import json

from lesscache.fallback.html import client_side_block, style_block, stylesheet_link


class TestStylesheetLink:
    def test_link(self):
        assert stylesheet_link("/css/a.css") == '<link rel="stylesheet" href="/css/a.css"/>'

    def test_escapes_url(self):
        assert "&quot;" in stylesheet_link('/css/a".css')


class TestStyleBlock:
    def test_wraps_css(self):
        assert style_block(".a{}") == "<style>.a{}</style>"

    def test_closing_tag_neutralized(self):
        html = style_block(".a{content:'</style><script>'}")
        assert html.count("</style>") == 1
        assert "<\\/style>" in html


class TestClientSideBlock:
    def test_structure(self):
        html = client_side_block(["/styles.less", "/blog/theme.less"], {"env": "production"}, "/less.js")
        assert html.count('rel="stylesheet/less"') == 2
        assert 'href="/styles.less"' in html
        assert 'href="/blog/theme.less"' in html
        assert html.index("<script>less = ") < html.index('<script src="/less.js">')

    def test_config_is_json(self):
        html = client_side_block([], {"env": "development", "async": True}, "/less.js")
        start = html.index("less = ") + len("less = ")
        end = html.index(";</script>")
        assert json.loads(html[start:end]) == {"async": True, "env": "development"}

    def test_config_cannot_close_script(self):
        html = client_side_block([], {"x": "</script>"}, "/less.js")
        assert html.count("</script>") == 2
