# tests/unit/cache/test_unit_compile_cache.py — v2
"""Tests for cache/compile_cache.py — CompileCache.get_or_compile."""

from __future__ import annotations

import logging
import os
import threading

from lesscache.cache.base_cache_store import CacheWriteError
from lesscache.cache.compile_cache import CompileCache
from lesscache.cache.memory_store import MemoryArtifactStore
from lesscache.cache.models import CompiledOutput
from lesscache.compiler.models import CompileError, CompileRequest


def _request(resolver, *refs, **kwargs):
    return CompileRequest(sources=tuple(resolver.resolve_raw(r) for r in refs), **kwargs)


class _FailingStore(MemoryArtifactStore):
    def put(self, key, css, sources=None, dependencies=None, backend=""):
        raise CacheWriteError("disk full")


class TestGetOrCompile:
    def test_second_call_is_hit(self, compile_cache, resolver, fake_backend):
        first = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        second = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        assert isinstance(first, CompiledOutput) and isinstance(second, CompiledOutput)
        assert not first.cache_hit
        assert second.cache_hit
        assert first.artifact.css_url == second.artifact.css_url
        assert fake_backend.call_count == 1

    def test_artifact_written(self, compile_cache, resolver, webroot):
        out = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        assert (webroot / "css" / out.artifact.css_file).is_file()
        assert out.artifact.backend == "fake"
        assert compile_cache.read_css(out).startswith("@color: red;")

    def test_source_change_recompiles(self, compile_cache, resolver, webroot, fake_backend):
        compile_cache.get_or_compile(_request(resolver, "styles.less"))
        (webroot / "styles.less").write_text("@color: green;\n")
        out = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        assert not out.cache_hit
        assert fake_backend.call_count == 2

    def test_import_change_recompiles(self, compile_cache, resolver, webroot, fake_backend):
        first = compile_cache.get_or_compile(_request(resolver, "less/main.less"))
        (webroot / "less" / "vars.less").write_text("@gutter: 20px;\n")
        second = compile_cache.get_or_compile(_request(resolver, "less/main.less"))
        assert first.fingerprint.key == second.fingerprint.key
        assert not second.cache_hit
        assert fake_backend.call_count == 2
        assert "20px" in compile_cache.read_css(second)
        assert second.artifact.css_url != first.artifact.css_url
        assert "10px" in compile_cache.read_css(first)

    def test_overrides_change_key(self, compile_cache, resolver, fake_backend):
        red = compile_cache.get_or_compile(_request(resolver, "styles.less", variable_overrides={"color": "red"}))
        blue = compile_cache.get_or_compile(_request(resolver, "styles.less", variable_overrides={"color": "blue"}))
        assert red.artifact.css_file != blue.artifact.css_file
        assert fake_backend.call_count == 2

    def test_use_cache_false(self, compile_cache, resolver, webroot):
        out = compile_cache.get_or_compile(_request(resolver, "styles.less"), use_cache=False)
        assert out.is_inline
        assert out.css is not None
        assert os.listdir(webroot / "css") == []

    def test_no_store(self, compiler, resolver):
        cache = CompileCache(compiler)
        out = cache.get_or_compile(_request(resolver, "styles.less"))
        assert out.is_inline

    def test_failure_returned_unchanged(self, compile_cache, resolver, webroot):
        result = compile_cache.get_or_compile(_request(resolver, "styles.less", "broken.less"))
        assert isinstance(result, CompileError)
        assert os.listdir(webroot / "css") == []

    def test_failure_not_cached(self, compile_cache, resolver, fake_backend):
        compile_cache.get_or_compile(_request(resolver, "broken.less"))
        compile_cache.get_or_compile(_request(resolver, "broken.less"))
        assert fake_backend.call_count == 2

    def test_deleted_source(self, compile_cache, resolver, webroot):
        request = _request(resolver, "styles.less")
        (webroot / "styles.less").unlink()
        result = compile_cache.get_or_compile(request)
        assert isinstance(result, CompileError)
        assert result.kind == "import"

    def test_write_failure_serves_inline(self, compiler, resolver, caplog):
        cache = CompileCache(compiler, _FailingStore())
        with caplog.at_level(logging.WARNING, logger="lesscache"):
            out = cache.get_or_compile(_request(resolver, "styles.less"))
        assert isinstance(out, CompiledOutput)
        assert out.is_inline
        assert "@color" in out.css
        assert any("cache write failed" in r.getMessage() for r in caplog.records)

    def test_corrupt_entry_recompiled(self, compile_cache, resolver, webroot, fake_backend):
        out = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        meta = webroot / "css" / f"lesscache_{out.fingerprint.key}.json"
        meta.write_text("garbage")
        again = compile_cache.get_or_compile(_request(resolver, "styles.less"))
        assert not again.cache_hit
        assert fake_backend.call_count == 2


class TestConcurrency:
    def test_same_fingerprint_compiles_once(self, compile_cache, resolver, fake_backend):
        request = _request(resolver, "styles.less")
        results: list[object] = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(compile_cache.get_or_compile(request))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert fake_backend.call_count == 1
        assert len({r.artifact.css_url for r in results}) == 1
        assert compile_cache._locks == {}


class TestFingerprintLocks:
    def test_released_after_hit_and_miss(self, compile_cache, resolver):
        compile_cache.get_or_compile(_request(resolver, "styles.less"))
        compile_cache.get_or_compile(_request(resolver, "styles.less"))
        assert compile_cache._locks == {}

    def test_released_after_failure(self, compile_cache, resolver):
        compile_cache.get_or_compile(_request(resolver, "broken.less"))
        assert compile_cache._locks == {}

    def test_distinct_requests_leave_no_locks(self, compile_cache, resolver):
        for ref in ("styles.less", "less/main.less", "less/vars.less"):
            compile_cache.get_or_compile(_request(resolver, ref))
        assert compile_cache._locks == {}
