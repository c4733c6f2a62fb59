"""Command-line access to the federated search engine.

Loads a JSON export of the reference store, indexes it, and prints search
results, autosuggest completions or index statistics as JSON:

    acuref-search --snapshot data.json search "neck pain" --type point
    acuref-search --snapshot data.json suggest "hea"
    acuref-search --snapshot data.json stats
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
from typing import Any

import anyio
import orjson

from acuref_search.adapters.record_source import JsonSnapshotRecordSource, RecordSourceError
from acuref_search.config import Settings
from acuref_search.domain.records import EntityType
from acuref_search.domain.search import SearchFilters, SearchResult
from acuref_search.engine import FederatedSearchEngine
from acuref_search.observability import configure_logging, init_tracing
from acuref_search.search.entities import ENTITY_PROFILES
from acuref_search.search.registry import IndexBuildError


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="acuref-search", description=__doc__.splitlines()[0])
    parser.add_argument("--snapshot", type=Path, required=True, help="JSON export of the reference store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search all entity types")
    search.add_argument("query")
    search.add_argument("--type", choices=[entity_type.value for entity_type in EntityType])
    search.add_argument("--taxonomy", help="Meridian, modality or herb meridian to keep")
    search.add_argument("--category", help="Point, indication or diet category to keep")
    search.add_argument("--limit", type=int, help="Show at most this many results")
    search.add_argument("--and", dest="match_all", action="store_true", help="Require every query term to match")

    suggest = subparsers.add_parser("suggest", help="Autocomplete a partial query")
    suggest.add_argument("query")
    suggest.add_argument("--limit", type=int)

    stats = subparsers.add_parser("stats", help="Show indexed record counts and field boosts")
    stats.add_argument("--schemas", action="store_true", help="Include per-type field definitions")
    return parser


def result_to_dict(result: SearchResult) -> dict[str, Any]:
    payload = result.model_dump(mode="json", exclude={"data"})
    payload["data"] = dict(result.data)
    return payload


def _run(args: argparse.Namespace, engine: FederatedSearchEngine) -> Any:
    if args.command == "search":
        filters = SearchFilters(type=args.type, taxonomy=args.taxonomy, category=args.category)
        results = engine.search(args.query, filters, combine_with="and" if args.match_all else None)
        if args.limit is not None:
            results = results[: max(args.limit, 0)]
        return [result_to_dict(result) for result in results]
    if args.command == "suggest":
        return engine.auto_suggest(args.query, args.limit)
    payload: dict[str, Any] = engine.stats()
    if args.schemas:
        payload["schemas"] = {
            entity_type.value: profile.schema.to_dict() for entity_type, profile in ENTITY_PROFILES.items()
        }
    return payload


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level, settings.log_json, stream=sys.stderr)
    if settings.tracing_enabled:
        init_tracing(service_name=settings.service_name)

    engine = FederatedSearchEngine(settings=settings)
    try:
        anyio.run(engine.refresh, JsonSnapshotRecordSource(args.snapshot))
    except (RecordSourceError, IndexBuildError) as exc:
        logger.error("Could not index %s: %s", args.snapshot, exc)
        return 1

    output = _run(args, engine)
    sys.stdout.write(orjson.dumps(output, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
