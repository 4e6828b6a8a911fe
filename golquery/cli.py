# ============================================================================
# CLAUDE CONTEXT - COMMAND-LINE RUNNER
# ============================================================================
# STATUS: Trigger - command-line entry point
# PURPOSE: Run one query against a store and print the count and sample features
# EXPORTS: build_parser, run, main
# DEPENDENCIES: argparse, json, util_logger
# SOURCE: GOL file path from argv or GOLQUERY_GOL_PATH
# PATTERNS: Thin trigger over FeatureStore
# ENTRY_POINTS: python -m golquery planet.gol --preset restaurants --bbox -73.98 45.40 -73.48 45.70
# ============================================================================

"""
Command-line runner.

Examples:
    python -m golquery planet.gol --preset restaurants --bbox -73.9781 45.4042 -73.4766 45.7042
    python -m golquery planet.gol --query "w[highway=motorway]" --bbox 12.45 55.61 12.65 55.73
    python -m golquery planet.gol --amenity hospital --center -73.6 45.5 0.1 --geojson

Exit codes: 0 success, 1 store/query/materialize failure, 2 usage error.
"""

import argparse
import json
import sys
from typing import List, Optional, TextIO

from util_logger import LoggerFactory, ComponentType, log_exceptions

from . import queries
from .config import ENGINE_NAMES, get_golquery_config
from .errors import GolQueryError
from .models import BoundingBox, Feature
from .store import FeatureStore

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "cli")

DETAIL_TAGS = ("cuisine", "phone", "website", "ref", "highway")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="golquery",
        description="Query a read-only OpenStreetMap feature store inside a bounding box."
    )
    parser.add_argument("store", nargs="?", default=None,
                        help="Store path (defaults to GOLQUERY_GOL_PATH).")

    what = parser.add_mutually_exclusive_group(required=True)
    what.add_argument("--query", help="Raw query string, e.g. 'na[amenity=restaurant,cafe]'.")
    what.add_argument("--amenity", help="Amenity value, e.g. 'restaurant'.")
    what.add_argument("--preset", choices=sorted(queries.PRESETS), help="Named convenience query.")

    where = parser.add_mutually_exclusive_group(required=True)
    where.add_argument("--bbox", nargs=4, type=float, metavar=("WEST", "SOUTH", "EAST", "NORTH"),
                       help="Bounding box in degrees.")
    where.add_argument("--center", nargs=3, type=float, metavar=("LON", "LAT", "RADIUS"),
                       help="Center point and radius, all in degrees.")

    parser.add_argument("--engine", default=None, choices=list(ENGINE_NAMES),
                        help="Engine adapter (defaults to GOLQUERY_ENGINE).")
    parser.add_argument("--limit", type=int, default=None,
                        help="Features to print (defaults to GOLQUERY_SAMPLE_LIMIT).")
    parser.add_argument("--geojson", action="store_true",
                        help="Print a GeoJSON FeatureCollection instead of a summary.")
    return parser


def _print_feature(index: int, feature: Feature, out: TextIO) -> None:
    print(f"\n{index}. {feature.name or '(unnamed)'}", file=out)
    print(f"   ID: {feature.id}", file=out)
    print(f"   Type: {feature.type_name}", file=out)
    print(f"   Location: {feature.lon:.4f}, {feature.lat:.4f}", file=out)
    for key in DETAIL_TAGS:
        value = feature.tag(key)
        if value is not None:
            print(f"   {key}: {value}", file=out)
    if feature.nodes:
        print(f"   Nodes: {len(feature.nodes)}", file=out)


@log_exceptions(logger=logger)
def run(args: argparse.Namespace, out: Optional[TextIO] = None) -> int:
    """
    Execute one parsed command line.

    Raises:
        GolQueryError: open, query or materialize failed
    """
    out = out or sys.stdout
    config = get_golquery_config()
    store_path = args.store or config.gol_path
    limit = args.limit if args.limit is not None else config.sample_limit

    if args.bbox:
        bbox = BoundingBox(*args.bbox)
    else:
        bbox = BoundingBox.from_center(*args.center)

    with FeatureStore.open(store_path, engine=args.engine, config=config) as store:
        if args.amenity is not None:
            result = store.query_amenities(args.amenity, bbox)
        elif args.query is not None:
            result = store.query(args.query, bbox)
        else:
            result = store.query(queries.PRESETS[args.preset], bbox)

        if args.geojson:
            json.dump(result.to_feature_collection(), out, indent=2)
            out.write("\n")
            return 0

        print(f"Found {result.count()} features for '{result.query}'", file=out)
        features = result.materialize()
        if features:
            print(f"\nFirst {min(limit, len(features))}:", file=out)
        for index, feature in enumerate(features[:limit], start=1):
            _print_feature(index, feature, out)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.store and not get_golquery_config().gol_path:
        parser.error("a store path is required (argument or GOLQUERY_GOL_PATH)")
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    try:
        return run(args)
    except GolQueryError as e:
        print(f"{e.error_type}: {e.message}", file=sys.stderr)
        return 1
