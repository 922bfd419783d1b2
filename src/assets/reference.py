# src/assets/reference.py — v1
"""Reference parsing — turns raw stylesheet strings into tagged AssetReferences.

Both module notations are recognised:

    Blog.less/theme.less      explicit delimiter notation
    /blog/less/theme.less     path notation (first segment names the module)

Precedence when both could apply: the explicit delimiter wins, then the
path notation, then the reference is bare. A notation only qualifies when
its module name is registered, so ``styles.less`` stays a bare file.
Parsing looks at names only; AssetResolver.resolve_raw falls back to the
webroot when a module reference names no file in that module.
"""

from __future__ import annotations

from lesscache.assets.models import AssetReference
from lesscache.assets.registry import ModuleRegistry, canonical_module_name


def normalize_path(raw: str) -> str:
    """Strip query strings, leading ``./`` and ``/`` and collapse backslashes."""
    path = raw.strip().split("?", 1)[0].split("#", 1)[0]
    path = path.replace("\\", "/")
    while path.startswith("./") or path.startswith("/"):
        path = path[2:] if path.startswith("./") else path[1:]
    return path


def split_first_segment(path: str) -> tuple[str, str]:
    """Split ``a/b/c`` into ``("a", "b/c")``. A single segment yields ``("", path)``."""
    head, sep, tail = path.partition("/")
    if not sep:
        return "", path
    return head, tail


def parse_reference(
    raw: str, registry: ModuleRegistry, delimiter: str = "."
) -> AssetReference:
    """Parse a raw reference into a canonical AssetReference.

    Args:
        raw: Reference as written by the caller.
        registry: Registered modules, used to decide whether a prefix is a module.
        delimiter: Explicit namespace delimiter.

    Returns:
        A ``module`` reference with a canonical module name, or a ``bare`` one.
    """
    text = raw.strip()
    if not text:
        raise ValueError("Empty stylesheet reference")

    # 1. explicit delimiter notation
    prefix, sep, rest = text.partition(delimiter)
    if sep and prefix and rest and "/" not in prefix and "\\" not in prefix:
        if registry.lookup(prefix) is not None:
            return AssetReference.qualified(
                canonical_module_name(prefix), normalize_path(rest)
            )

    # 2. path notation
    path = normalize_path(text)
    head, tail = split_first_segment(path)
    if head and tail and registry.lookup(head) is not None:
        return AssetReference.qualified(canonical_module_name(head), tail)

    # 3. bare
    return AssetReference.bare(path)
