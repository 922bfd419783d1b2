# src/api/models.py — v2
"""Wired component bundle returned by the facade."""

from __future__ import annotations

from dataclasses import dataclass

from lesscache.assets.resolver import AssetResolver
from lesscache.cache.compile_cache import CompileCache
from lesscache.compiler.compiler import LessCompiler
from lesscache.config.settings import Settings
from lesscache.fallback.orchestrator import FallbackOrchestrator


@dataclass(frozen=True)
class Pipeline:
    """Every component of a configured stylesheet pipeline."""

    settings: Settings
    resolver: AssetResolver
    compiler: LessCompiler
    cache: CompileCache
    orchestrator: FallbackOrchestrator
