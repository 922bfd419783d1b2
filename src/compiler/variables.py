# src/compiler/variables.py — v1
"""Variable overrides (modifyVars) applied to an assembled LESS document.

LESS resolves variables lazily, so appending ``@name: value;`` after every
source makes it win everywhere. lesscpy evaluates eagerly, so the same
result is produced by rewriting the value of each top-level declaration in
place. Variables no source declares are prepended instead.
"""

from __future__ import annotations

import re

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_DECL_RE = re.compile(r"@(?P<name>[A-Za-z0-9_-]+)\s*:")


def normalize_overrides(overrides: dict[str, str] | None) -> dict[str, str]:
    """Strip leading ``@`` from names and trailing ``;`` from values.

    Raises:
        ValueError: If a name is not a valid LESS variable name.
    """
    normalized: dict[str, str] = {}
    for name, value in (overrides or {}).items():
        key = str(name).strip().lstrip("@")
        if not _NAME_RE.match(key):
            raise ValueError(f"Invalid LESS variable name: {name!r}")
        normalized[key] = str(value).strip().rstrip(";").strip()
    return normalized


def apply_variable_overrides(text: str, overrides: dict[str, str]) -> str:
    """Return ``text`` with ``overrides`` taking precedence over its defaults."""
    overrides = normalize_overrides(overrides)
    if not overrides:
        return text

    spans = _top_level_declarations(text)
    edits: list[tuple[int, int, str]] = []
    missing: list[str] = []
    for name, value in overrides.items():
        if name in spans:
            edits.extend((start, end, f" {value}") for start, end in spans[name])
        else:
            missing.append(name)

    for start, end, replacement in sorted(edits, reverse=True):
        text = text[:start] + replacement + text[end:]

    if missing:
        header = "".join(f"@{name}: {overrides[name]};\n" for name in missing)
        text = header + text
    return text


def _top_level_declarations(text: str) -> dict[str, list[tuple[int, int]]]:
    """Map variable name -> value spans of its declarations at brace depth 0."""
    spans: dict[str, list[tuple[int, int]]] = {}
    i, n = 0, len(text)
    depth = 0
    parens = 0
    at_statement = True
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        if text.startswith("//", i) and parens == 0:
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        if depth == 0 and at_statement:
            match = _DECL_RE.match(text, i)
            if match:
                end = _value_end(text, match.end())
                spans.setdefault(match.group("name"), []).append((match.end(), end))
                i = end + 1
                continue
        if ch in ("'", '"'):
            i = _skip_string(text, i)
            at_statement = False
            continue
        if ch == "(":
            parens += 1
        elif ch == ")":
            parens = max(parens - 1, 0)
        if ch == "{":
            depth += 1
            at_statement = True
        elif ch == "}":
            depth = max(depth - 1, 0)
            at_statement = True
        elif ch == ";":
            at_statement = True
        else:
            at_statement = False
        i += 1
    return spans


def _value_end(text: str, start: int) -> int:
    """Index of the ``;`` ending a declaration value (or the end of the text)."""
    i, n = start, len(text)
    parens = 0
    braces = 0
    while i < n:
        ch = text[i]
        if ch in ("'", '"'):
            i = _skip_string(text, i)
            continue
        if ch == "(":
            parens += 1
        elif ch == ")":
            parens = max(parens - 1, 0)
        elif ch == "{":
            braces += 1
        elif ch == "}":
            if braces == 0:
                return i
            braces -= 1
        elif ch == ";" and parens == 0 and braces == 0:
            return i
        i += 1
    return n


def _skip_string(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return len(text)
