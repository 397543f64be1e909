"""Command-line entry point for translating queries, searching and rebuilding the index."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from search_bridge.bootstrap import build_services
from search_bridge.config import Settings, get_settings
from search_bridge.errors import SearchBridgeError
from search_bridge.observability.logging import configure_logging
from search_bridge.observability.tracing import init_tracing
from search_bridge.search.query_transformer import transform_search_query
from search_bridge.service_layer.index_maintainer import REINDEX_KINDS


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="search-bridge",
        description="Translate, run and rebuild searches against the object index",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transform = subparsers.add_parser("transform", help="Print the index form of a user query")
    transform.add_argument("query", help="User query, e.g. 'role:web AND name:foo*'")

    search = subparsers.add_parser("search", help="Search one kind and print the hydrated page")
    search.add_argument("kind", help="Builtin kind (node, role, client, environment) or a data bag name")
    search.add_argument("query", nargs="?", default=None, help="User query (default: match everything)")
    search.add_argument("--start", type=int, help="Result offset")
    search.add_argument("--rows", type=int, help="Page size (default: SEARCH_DEFAULT_ROWS)")
    search.add_argument("--sort", help="Sort expression passed through to the index")

    subparsers.add_parser("indexes", help="List searchable kinds and their search URLs")

    reindex = subparsers.add_parser("reindex", help="Wipe and rebuild the index for the configured database")
    reindex.add_argument(
        "--kinds",
        nargs="+",
        metavar="KIND",
        default=list(REINDEX_KINDS),
        help=f"Kinds walked before data bags (default: {' '.join(REINDEX_KINDS)})",
    )
    return parser


def _search_params(args: argparse.Namespace) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if args.query is not None:
        params["q"] = args.query
    for key in ("start", "rows", "sort"):
        value = getattr(args, key)
        if value is not None:
            params[key] = value
    return params


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, sort_keys=True) + "\n")


async def _run_command(args: argparse.Namespace, settings: Settings) -> Any:
    async with build_services(settings, reindex_kinds=getattr(args, "kinds", REINDEX_KINDS)) as services:
        if args.command == "search":
            page = await services.search.search_index(args.kind, _search_params(args))
            return page.to_display()
        if args.command == "indexes":
            return await services.search.list_indexes(settings.base_url)
        report = await services.maintainer.rebuild_index()
        return report.to_dict()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if args.command == "transform":
        sys.stdout.write(transform_search_query(args.query) + "\n")
        return 0

    try:
        settings = get_settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 1

    configure_logging(settings.log_level, settings.log_json, stream=sys.stderr)
    init_tracing()

    try:
        payload = asyncio.run(_run_command(args, settings))
    except ValidationError as exc:
        logger.error("Invalid search parameters: %s", exc)
        return 1
    except SearchBridgeError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1

    _print_json(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
