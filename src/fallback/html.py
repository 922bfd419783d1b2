# src/fallback/html.py — v1
"""HTML fragments for compiled stylesheets and the client-side fallback."""

from __future__ import annotations

import json
import re
from html import escape
from typing import Any

_CLOSING_STYLE_RE = re.compile(r"</(style)", re.IGNORECASE)


def stylesheet_link(url: str) -> str:
    """``<link>`` tag for a compiled stylesheet file."""
    return f'<link rel="stylesheet" href="{escape(url)}"/>'


def style_block(css: str) -> str:
    """``<style>`` block for inline CSS."""
    safe = _CLOSING_STYLE_RE.sub(r"<\\/\1", css)
    return f"<style>{safe}</style>"


def client_side_block(
    hrefs: list[str], js_options: dict[str, Any], less_js_url: str
) -> str:
    """Markup that lets the browser compile the original LESS sources.

    One ``rel="stylesheet/less"`` link per source, the ``less`` configuration
    object, then the compiler script itself.
    """
    links = "".join(
        f'<link rel="stylesheet/less" type="text/css" href="{escape(href)}"/>'
        for href in hrefs
    )
    config = json.dumps(js_options, sort_keys=True)
    config = config.replace("</", "<\\/")
    return (
        f"{links}"
        f"<script>less = {config};</script>"
        f'<script src="{escape(less_js_url)}"></script>'
    )
