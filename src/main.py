# src/main.py — v2
"""CLI entry point — render, compile, fingerprint and cache commands.

Usage:
    lesscache render <ref>... [options]
    lesscache compile <ref>... [--no-cache] [--var NAME=VALUE] [-o FILE]
    lesscache fingerprint <ref>... [--var NAME=VALUE]
    lesscache cache list
    lesscache cache purge
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lesscache.config.settings import ConfigurationError
from lesscache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except (ValueError, ConfigurationError, argparse.ArgumentTypeError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    _setup_logging(settings, args.verbose)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lesscache",
        description=f"lesscache v{__version__} - cached LESS compilation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--webroot", type=Path, default=None,
        help="Primary asset root (default: LESSCACHE_WEBROOT or ./webroot)",
    )
    parser.add_argument(
        "--module", action="append", default=[], metavar="NAME=ROOT",
        help="Register a module asset root (repeatable)",
    )
    parser.add_argument(
        "--debug", action="store_true", default=None,
        help="Debug mode: source maps on, client-side errors visible",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- render ---
    p_render = subparsers.add_parser(
        "render", help="Render HTML for stylesheet references",
    )
    p_render.add_argument("references", nargs="+", help="Stylesheet references")
    p_render.add_argument("--no-cache", action="store_true", help="Inline CSS instead of caching")
    p_render.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")
    p_render.set_defaults(func=_cmd_render)

    # --- compile ---
    p_compile = subparsers.add_parser(
        "compile", help="Compile stylesheet references to CSS",
    )
    p_compile.add_argument("references", nargs="+", help="Stylesheet references")
    p_compile.add_argument("--no-cache", action="store_true", help="Bypass the artifact cache")
    p_compile.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")
    p_compile.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write CSS to this file instead of stdout",
    )
    p_compile.set_defaults(func=_cmd_compile)

    # --- fingerprint ---
    p_fp = subparsers.add_parser(
        "fingerprint", help="Print the cache key of a compile request",
    )
    p_fp.add_argument("references", nargs="+", help="Stylesheet references")
    p_fp.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")
    p_fp.set_defaults(func=_cmd_fingerprint)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or purge the artifact cache")
    p_cache.add_argument("action", choices=["list", "purge"])
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _load_settings(args: argparse.Namespace):
    """Settings from the environment with CLI overrides applied."""
    from lesscache.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.webroot is not None:
        overrides["webroot"] = args.webroot
    if args.debug:
        overrides["debug"] = True
    if args.module:
        overrides["module_asset_roots"] = {
            name: Path(root) for name, root in _parse_pairs(args.module).items()
        }
    return load_settings(**overrides)


def _cmd_render(args: argparse.Namespace, settings) -> int:
    """Render HTML for the given references."""
    from lesscache.api.facade import build_pipeline

    pipeline = build_pipeline(settings)
    options = {"cache": False} if args.no_cache else None
    result = pipeline.orchestrator.render(args.references, options, _parse_pairs(args.var))
    print(result.html)
    return 0 if not result.degraded else 3


def _cmd_compile(args: argparse.Namespace, settings) -> int:
    """Compile the given references and emit CSS."""
    from lesscache.api.facade import build_pipeline
    from lesscache.compiler.models import CompileError

    pipeline = build_pipeline(settings)
    opts = pipeline.orchestrator.resolve_options({"cache": not args.no_cache})
    request = pipeline.orchestrator.build_request(args.references, opts, _parse_pairs(args.var))
    if isinstance(request, CompileError):
        logger.error("Error compiling less file: %s", request)
        return 1

    result = pipeline.cache.get_or_compile(request, use_cache=bool(opts.cache))
    if isinstance(result, CompileError):
        logger.error("Error compiling less file: %s", result)
        return 1

    css = pipeline.cache.read_css(result)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(css, encoding="utf-8")
        logger.info("Wrote %s (%d bytes)", args.output, len(css))
    else:
        sys.stdout.write(css)
    if result.artifact is not None:
        logger.info(
            "Artifact %s (%s)", result.artifact.css_file, "hit" if result.cache_hit else "new",
        )
    return 0


def _cmd_fingerprint(args: argparse.Namespace, settings) -> int:
    """Print the fingerprint key of a request without compiling it."""
    from lesscache.api.facade import build_pipeline
    from lesscache.cache.fingerprint import compute_fingerprint
    from lesscache.compiler.models import CompileError

    pipeline = build_pipeline(settings)
    opts = pipeline.orchestrator.resolve_options(None)
    request = pipeline.orchestrator.build_request(args.references, opts, _parse_pairs(args.var))
    if isinstance(request, CompileError):
        logger.error("%s", request)
        return 1

    fingerprint = compute_fingerprint(request)
    print(fingerprint.key)
    for digest in fingerprint.sources:
        print(f"  {digest.sha256[:12]}  {digest.path}")
    return 0


def _cmd_cache(args: argparse.Namespace, settings) -> int:
    """List or purge cached artifacts."""
    from lesscache.cache.cache_factory import create_artifact_store

    store = create_artifact_store(settings)
    if args.action == "purge":
        removed = store.purge()
        print(f"Removed {removed} artifact(s)")
        return 0

    entries = store.list_entries()
    for entry in sorted(entries, key=lambda e: e.created_at):
        print(f"{entry.created_at:%Y-%m-%d %H:%M:%S}  {entry.css_file}  ({len(entry.sources)} source(s))")
    print(f"\n{len(entries)} artifact(s) in {settings.cache_dir}")
    return 0


def _parse_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse NAME=VALUE arguments."""
    parsed: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {pair!r}")
        parsed[name.strip()] = value.strip()
    return parsed


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from lesscache.logging.logger import setup_logging_from_settings

    setup_logging_from_settings(settings, verbose=verbose, stream=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
