# src/main.py — v1
"""CLI entry point: search, pattern, sources, cache-clear, cache-sweep commands.

Usage:
    swiftpatterns search <query> [--code]
    swiftpatterns pattern <topic> [--source ID] [--min-quality N]
    swiftpatterns sources
    swiftpatterns cache-clear
    swiftpatterns cache-sweep
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from swiftpatterns.config.settings import Settings, load_settings
from swiftpatterns.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swiftpatterns",
        description=f"swift-patterns v{__version__} - Swift article search over cached feeds",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- search ---
    p_search = subparsers.add_parser(
        "search", help="Search all enabled sources",
    )
    p_search.add_argument("query", help="Free-text query")
    p_search.add_argument(
        "--code", action="store_true",
        help="Only return results that contain code",
    )
    p_search.set_defaults(func=_cmd_search)

    # --- pattern ---
    p_pattern = subparsers.add_parser(
        "pattern", help="Look up patterns for a topic",
    )
    p_pattern.add_argument("topic", help="Topic, e.g. 'swiftui navigation'")
    p_pattern.add_argument(
        "--source", default="all",
        help="Source id or 'all' (default: all)",
    )
    p_pattern.add_argument(
        "--min-quality", type=int, default=None,
        help="Minimum relevance score 0-100 (default: from settings)",
    )
    p_pattern.set_defaults(func=_cmd_pattern)

    # --- sources ---
    p_sources = subparsers.add_parser(
        "sources", help="List content sources and their enabled state",
    )
    p_sources.set_defaults(func=_cmd_sources)

    # --- cache maintenance ---
    p_clear = subparsers.add_parser("cache-clear", help="Delete every cached entry")
    p_clear.set_defaults(func=_cmd_cache_clear)

    p_sweep = subparsers.add_parser("cache-sweep", help="Delete expired cache entries")
    p_sweep.set_defaults(func=_cmd_cache_sweep)

    return parser


async def _cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    from swiftpatterns.api.facade import PatternService

    async with PatternService(settings) as service:
        response = await service.search(args.query, require_code=args.code)
    print(response.text)
    return 1 if response.is_error else 0


async def _cmd_pattern(args: argparse.Namespace, settings: Settings) -> int:
    from swiftpatterns.api.facade import PatternService

    async with PatternService(settings) as service:
        response = await service.get_pattern(
            args.topic, source=args.source, min_quality=args.min_quality
        )
    print(response.text)
    return 1 if response.is_error else 0


async def _cmd_sources(args: argparse.Namespace, settings: Settings) -> int:
    from swiftpatterns.api.facade import PatternService

    async with PatternService(settings) as service:
        response = await service.list_sources()
    print(response.text)
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, settings: Settings) -> int:
    from swiftpatterns.api.facade import PatternService

    service = PatternService(settings)
    try:
        await service.clear_caches()
    finally:
        await service.close()
    print(f"Cleared caches under {service.settings.cache_root}")
    return 0


async def _cmd_cache_sweep(args: argparse.Namespace, settings: Settings) -> int:
    from swiftpatterns.api.facade import PatternService

    service = PatternService(settings)
    try:
        removed = await service.sweep_caches()
    finally:
        await service.close()
    print(f"Removed {removed} expired entries")
    return 0


def _load_settings(verbose: bool) -> Settings:
    """Load settings and configure logging for CLI usage."""
    from swiftpatterns.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return settings


if __name__ == "__main__":
    sys.exit(main())
