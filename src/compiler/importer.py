# src/compiler/importer.py — v1
"""Import inliner — expands ``@import`` statements into a single LESS source.

lesscpy resolves imports relative to the process working directory, which
does not work for module assets. The inliner does the resolution itself:
next to the importing file first, then through an ImportResolver, and hands
the backend one self-contained document.

Supported import options: (less), (css), (inline), (optional), (once),
(multiple). Plain CSS imports (``.css`` targets, ``url(...)`` targets and
remote URLs) are left in place for the browser.
"""

from __future__ import annotations

import hashlib
import logging
import posixpath
import re
from pathlib import Path
from urllib.parse import urljoin

from lesscache.assets.models import AssetReference, ResolvedAsset
from lesscache.compiler.import_resolver import ImportResolver
from lesscache.compiler.models import CompileError, ParserOptions

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(
    r"""@import\s*
        (?:\((?P<options>[^)]*)\)\s*)?
        (?P<target>"[^"]*"|'[^']*'|url\(\s*[^)]*\))
        (?P<media>[^;{}]*);""",
    re.VERBOSE,
)
_URL_RE = re.compile(r"""url\(\s*(?P<quote>['"]?)(?P<url>[^'")]+)(?P=quote)\s*\)""")
_KNOWN_OPTIONS = frozenset({"less", "css", "inline", "optional", "once", "multiple"})
_ABSOLUTE_URL_PREFIXES = ("data:", "http:", "https:", "//", "/", "#", "about:")


class ImportExpansionError(Exception):
    """Raised inside the inliner; converted to a CompileError at the compiler boundary."""

    def __init__(self, error: CompileError) -> None:
        super().__init__(error.message)
        self.error = error


class ImportInliner:
    """Expands the imports of one compile request.

    A single inliner instance is used per request so that ``once`` semantics
    and the dependency record span every source of that request.
    """

    def __init__(
        self,
        import_resolver: ImportResolver,
        options: ParserOptions | None = None,
        max_depth: int = 32,
    ) -> None:
        self._import_resolver = import_resolver
        self._options = options or ParserOptions()
        self._max_depth = max_depth
        self._seen: set[Path] = set()
        self.dependencies: dict[str, str] = {}

    def expand(self, asset: ResolvedAsset) -> str:
        """Return the asset's text with all imports expanded.

        Raises:
            ImportExpansionError: On unreadable files, missing imports,
                unsupported options or excessive nesting.
        """
        return self._expand(asset, depth=0)

    def _expand(self, asset: ResolvedAsset, depth: int) -> str:
        if depth > self._max_depth:
            raise ImportExpansionError(CompileError(
                kind="import",
                message=f"Import nesting deeper than {self._max_depth} levels",
                reference=asset.reference,
            ))
        text = self._read(asset)
        comments = _comment_spans(text)

        pieces: list[str] = []
        last = 0
        for match in _IMPORT_RE.finditer(text):
            if _inside(comments, match.start()):
                continue
            pieces.append(self._rewrite_urls(text[last:match.start()], asset))
            pieces.append(self._inline_import(match, asset, depth))
            last = match.end()
        pieces.append(self._rewrite_urls(text[last:], asset))
        return "".join(pieces)

    def _inline_import(self, match: re.Match[str], importer: ResolvedAsset, depth: int) -> str:
        statement = match.group(0)
        options = {
            opt.strip().lower()
            for opt in (match.group("options") or "").split(",")
            if opt.strip()
        }
        unknown = options - _KNOWN_OPTIONS
        if unknown:
            raise ImportExpansionError(CompileError(
                kind="import",
                message=f"Unsupported import option(s): {', '.join(sorted(unknown))}",
                reference=importer.reference,
            ))

        target = match.group("target")
        if target.startswith("url("):
            return statement
        path = target[1:-1].strip()
        if _is_plain_css(path, options):
            return statement

        child = self._locate(path, importer)
        if child is None:
            if "optional" in options:
                logger.debug("Optional import %s not found, skipping", path)
                return ""
            raise ImportExpansionError(CompileError(
                kind="import",
                message=f"'{path}' wasn't found (imported from {importer.reference})",
                reference=importer.reference,
            ))

        if child.absolute_path in self._seen and "multiple" not in options:
            return ""

        if "inline" in options:
            body = self._read(child)
        else:
            body = self._expand(child, depth + 1)

        media = match.group("media").strip()
        if media and "inline" not in options:
            return f"@media {media} {{\n{body}\n}}\n"
        return body

    def _locate(self, path: str, importer: ResolvedAsset) -> ResolvedAsset | None:
        candidates = [path]
        if not posixpath.splitext(path)[1]:
            candidates.append(f"{path}.less")

        here = importer.absolute_path.parent
        for candidate in candidates:
            try:
                found = (here / candidate).resolve(strict=True)
            except (OSError, RuntimeError):
                continue
            if found.is_file():
                return ResolvedAsset(
                    absolute_path=found,
                    public_base_url=_child_base_url(importer.public_base_url, candidate),
                    reference=_child_reference(importer.reference, candidate),
                )

        for candidate in candidates:
            resolved = self._import_resolver.resolve_import(candidate, importer)
            if resolved is not None:
                return resolved
        return None

    def _read(self, asset: ResolvedAsset) -> str:
        path = asset.absolute_path
        try:
            raw = path.read_bytes()
            text = raw.decode("utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ImportExpansionError(CompileError(
                kind="import",
                message=f"Cannot read {path}: {exc}",
                reference=asset.reference,
            )) from exc
        self._seen.add(path)
        self.dependencies[str(path)] = hashlib.sha256(raw).hexdigest()
        return text

    def _rewrite_urls(self, text: str, asset: ResolvedAsset) -> str:
        base = asset.public_base_url
        if not base or not self._options.relative_urls or "url(" not in text:
            return text

        def _replace(match: re.Match[str]) -> str:
            url = match.group("url").strip()
            if url.startswith(_ABSOLUTE_URL_PREFIXES) or "@{" in url or url.startswith("@"):
                return match.group(0)
            quote = match.group("quote")
            return f"url({quote}{urljoin(base + '/', url)}{quote})"

        return _URL_RE.sub(_replace, text)


def _is_plain_css(path: str, options: set[str]) -> bool:
    if "css" in options:
        return True
    if "less" in options or "inline" in options:
        return False
    lowered = path.lower()
    return lowered.endswith(".css") or lowered.startswith(("http://", "https://", "//"))


def _child_base_url(parent_base: str, import_path: str) -> str:
    if not parent_base:
        return ""
    subdir = posixpath.dirname(import_path)
    if not subdir:
        return parent_base
    return urljoin(parent_base + "/", subdir + "/").rstrip("/")


def _child_reference(parent: AssetReference, import_path: str) -> AssetReference:
    raw = posixpath.normpath(posixpath.join(posixpath.dirname(parent.raw_path), import_path))
    if parent.kind == "module" and parent.module_name:
        return AssetReference.qualified(parent.module_name, raw)
    return AssetReference.bare(raw)


def _comment_spans(text: str) -> list[tuple[int, int]]:
    """Locate ``/* */`` and ``//`` comments, ignoring ones inside strings or parens."""
    spans: list[tuple[int, int]] = []
    i, n = 0, len(text)
    quote: str | None = None
    parens = 0
    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            parens += 1
        elif ch == ")":
            parens = max(parens - 1, 0)
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            spans.append((i, end))
            i = end
            continue
        elif text.startswith("//", i) and parens == 0:
            end = text.find("\n", i)
            end = n if end == -1 else end
            spans.append((i, end))
            i = end
            continue
        i += 1
    return spans


def _inside(spans: list[tuple[int, int]], pos: int) -> bool:
    return any(start <= pos < end for start, end in spans)
