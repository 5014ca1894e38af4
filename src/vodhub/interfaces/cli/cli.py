from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import httpx
import structlog
import uvicorn

from vodhub.application.use_cases import AggregationEngine, SearchDispatchUseCase
from vodhub.domain.entities.aggregation import FilterState, YearOrder
from vodhub.infrastructure.aggregation import ResultSorter, group_results
from vodhub.infrastructure.cache.cache_factory import create_cache
from vodhub.infrastructure.config import AppConfig, load_config
from vodhub.infrastructure.logging.setup import configure_logging
from vodhub.infrastructure.persistence import CacheSearchHistory, PagedResultCache
from vodhub.infrastructure.registry import YamlProviderRegistry
from vodhub.interfaces.app import create_app
from vodhub.interfaces.client import SseEventStream
from vodhub.interfaces.composition import build_adapters

log = structlog.get_logger(__name__)


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--providers-file",
        default=None,
        help="Override providers YAML file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vodhub")
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP/SSE server.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )
    _add_config_flags(serve)

    search = commands.add_parser("search", help="Search all providers once.")
    search.add_argument("query", help="Search query.")
    search.add_argument(
        "--server",
        default=None,
        help="Base URL of a running vodhub server to stream from.",
    )
    search.add_argument(
        "--flat",
        action="store_true",
        help="Print the flat result list instead of title/year groups.",
    )
    search.add_argument(
        "--year-order",
        default="none",
        choices=["none", "asc", "desc"],
        help="Order results by year.",
    )
    search.add_argument(
        "--max-pages",
        default=None,
        type=int,
        help="Override search.max_pages.",
    )
    _add_config_flags(search)

    args = parser.parse_args(argv)
    if args.command is None:
        # Bare `vodhub` keeps the server entrypoint behaviour.
        args = parser.parse_args(["serve", *argv])
    return args


def _load(args: argparse.Namespace) -> AppConfig:
    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.providers_file:
        cli_overrides["providers_file"] = args.providers_file
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if getattr(args, "max_pages", None):
        cli_overrides["search_max_pages"] = args.max_pages

    return load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )


def _serve(args: argparse.Namespace, config: AppConfig) -> None:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "7979"))

    log_config = configure_logging(config)

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )


def print_engine(
    engine: AggregationEngine,
    filter_state: FilterState,
    *,
    flat: bool,
    out: TextIO,
) -> None:
    """Write the engine's current view as plain text lines."""
    if flat:
        for record in engine.filtered_results(filter_state):
            out.write(
                f"{record.title} ({record.year})  [{record.provider_label}]  "
                f"episodes={len(record.episodes)}  id={record.id}\n"
            )
    else:
        for group in engine.filtered_groups(filter_state):
            rep = group.representative
            out.write(
                f"{rep.title} ({group.year})  episodes={group.episode_count}  "
                f"sources={', '.join(group.source_names)}\n"
            )
    out.write(
        f"-- {engine.completed_providers}/{engine.total_providers} providers, "
        f"{len(engine.results)} results, {len(engine.groups)} groups\n"
    )


async def _search(args: argparse.Namespace, config: AppConfig) -> int:
    year_order: YearOrder = args.year_order
    engine = AggregationEngine(
        group_fn=group_results,
        sorter=ResultSorter(),
        flush_delay=config.search.flush_delay_ms / 1000.0,
        year_order=year_order,
    )
    query = args.query.strip()
    engine.begin(query)

    if args.server:
        await engine.consume(query, SseEventStream(args.server).events(query))
    else:
        cache = create_cache(
            backend=config.cache.backend,
            directory=str(config.cache.directory),
            ttl_seconds=config.cache.ttl_seconds,
            max_concurrent=config.cache.max_concurrent,
        )
        async with cache, httpx.AsyncClient(
            headers={"User-Agent": config.http_user_agent},
            follow_redirects=True,
        ) as client:
            page_cache = PagedResultCache(cache, ttl_seconds=config.cache.ttl_seconds)
            search_uc = SearchDispatchUseCase(
                registry=YamlProviderRegistry(
                    inline=config.providers.sources,
                    file=config.providers.file,
                ),
                adapters=build_adapters(config, page_cache, client),
                config=config.search,
                history=CacheSearchHistory(cache, limit=config.search.history_limit),
            )
            if config.search.fluid_search:
                await engine.consume(query, search_uc.dispatch(query))
            else:
                engine.load(query, await search_uc.search_all(query))

    print_engine(
        engine,
        FilterState(year_order=year_order),
        flat=args.flat,
        out=sys.stdout,
    )
    return 0


def start(argv: Iterable[str] | None = None) -> int:
    """Process entrypoint.

    Loads config exactly once, then runs the selected command with it.
    """
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    args = _parse_args(argv)
    config = _load(args)

    if args.command == "search":
        configure_logging(config)
        return asyncio.run(_search(args, config))

    _serve(args, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
