# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a temporary webroot with module roots, a counting fake backend and
wired resolver/compiler/cache objects. The fake backend never touches lesscpy.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lesscache.assets.registry import ModuleRegistry
from lesscache.assets.resolver import AssetResolver
from lesscache.cache.compile_cache import CompileCache
from lesscache.cache.file_store import FileArtifactStore
from lesscache.compiler.base_backend import BackendError, BaseLessBackend
from lesscache.compiler.compiler import LessCompiler
from lesscache.compiler.import_resolver import AssetImportResolver
from lesscache.compiler.models import ParserOptions
from lesscache.compiler.variables import apply_variable_overrides
from lesscache.config.settings import Settings
from lesscache.logging.context import clear_context


class FakeBackend(BaseLessBackend):
    """Backend that returns the assembled document with overrides applied.

    A source containing ``@@fail`` raises BackendError. Every call is recorded.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, str], ParserOptions]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def compile(self, source: str, overrides: dict[str, str], options: ParserOptions) -> str:
        self.calls.append((source, dict(overrides), options))
        if "@@fail" in source:
            raise BackendError("ParseError: Unrecognised input in @@fail")
        return apply_variable_overrides(source, overrides)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# === FIXTURES: filesystem ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def webroot(tmp_path: Path) -> Path:
    """Primary webroot with a few stylesheets and an empty css/ directory."""
    root = tmp_path / "webroot"
    _write(root / "styles.less", "@color: red;\nbody { color: @color; }\n")
    _write(root / "less" / "vars.less", "@gutter: 10px;\n")
    _write(
        root / "less" / "main.less",
        '@import "vars";\n.box { margin: @gutter; }\n',
    )
    _write(root / "broken.less", ".a { @@fail }\n")
    (root / "css").mkdir()
    return root


@pytest.fixture
def blog_root(tmp_path: Path) -> Path:
    """Asset root of the ``blog`` module."""
    root = tmp_path / "mods" / "blog" / "webroot"
    _write(root / "theme.less", "@accent: blue;\n.post { color: @accent; }\n")
    _write(
        root / "less" / "layout.less",
        ".hero { background: url(img/hero.png); }\n",
    )
    return root


@pytest.fixture
def registry(blog_root: Path) -> ModuleRegistry:
    reg = ModuleRegistry()
    reg.register("Blog", blog_root)
    return reg


@pytest.fixture
def resolver(webroot: Path, registry: ModuleRegistry) -> AssetResolver:
    return AssetResolver(webroot, registry, base_url="http://example.test")


# === FIXTURES: compiler and cache ===


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def compiler(fake_backend: FakeBackend, resolver: AssetResolver) -> LessCompiler:
    return LessCompiler(fake_backend, import_resolver=AssetImportResolver(resolver))


@pytest.fixture
def file_store(webroot: Path) -> FileArtifactStore:
    return FileArtifactStore(webroot / "css", url_prefix="/css")


@pytest.fixture
def compile_cache(compiler: LessCompiler, file_store: FileArtifactStore) -> CompileCache:
    return CompileCache(compiler, file_store)


@pytest.fixture
def settings(webroot: Path, blog_root: Path) -> Settings:
    return Settings(
        _env_file=None,
        webroot=webroot,
        module_asset_roots={"blog": blog_root},
        base_url="http://example.test",
    )
