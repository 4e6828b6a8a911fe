# ============================================================================
# CLAUDE CONTEXT - GEODESK ENGINE ADAPTER
# ============================================================================
# STATUS: Adapter - native GeoDESK engine behind the FeatureEngine contract
# PURPOSE: Open GOL files and run GOQL queries through the geodesk library
# EXPORTS: GeoDeskEngine, GeoDeskResult, feature_to_record
# INTERFACES: FeatureEngine
# PYDANTIC_MODELS: FeatureRecord, NodeRef
# DEPENDENCIES: geodesk (optional extra, imported lazily), os, dataclasses
# SOURCE: GeoDESK Geographic Object Library (.gol) files
# SCOPE: Translation between geodesk objects and FeatureRecord
# PATTERNS: Adapter Pattern, Snapshot-on-query
# ENTRY_POINTS: engine = GeoDeskEngine(); store = engine.open_store("planet.gol")
# ============================================================================

"""
GeoDESK Engine Adapter

Matches are snapshotted into FeatureRecord values when the query runs,
which makes every result handle self-contained: it never touches the GOL
file again and outlives the store it came from.

The geodesk package is an optional dependency (`pip install golquery[geodesk]`)
and is only imported when a store is opened.
"""

import os
from dataclasses import dataclass, field
from typing import Any, List

from util_logger import LoggerFactory, ComponentType

from .engine import FeatureEngine
from .errors import OpenFailure, QueryFailure
from .models import FeatureRecord, NodeRef

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "GeoDeskEngine")


def _import_geodesk():
    """Import the geodesk binding, reporting its absence as an open failure."""
    try:
        import geodesk
    except ImportError as e:
        raise OpenFailure(
            "The geodesk library is not installed - install golquery[geodesk] to read GOL files"
        ) from e
    return geodesk


@dataclass
class GeoDeskResult:
    """Self-contained result handle: the records captured at query time."""
    query: str
    records: List[FeatureRecord] = field(default_factory=list)


def _type_name(feature: Any) -> str:
    if feature.is_node:
        return "node"
    if feature.is_way:
        return "way"
    if feature.is_relation:
        return "relation"
    return "unknown"


def feature_to_record(feature: Any) -> FeatureRecord:
    """
    Copy one geodesk Feature into a FeatureRecord.

    Tags are emitted in the order geodesk yields them. The name is the first
    `name` tag, empty when absent. Ways also carry their member nodes.

    Args:
        feature: geodesk.Feature (or any object with the same attributes)

    Returns:
        FeatureRecord snapshot of the feature
    """
    tag_keys: List[str] = []
    tag_values: List[str] = []
    for key, value in feature.tags:
        tag_keys.append(str(key))
        tag_values.append(str(value))

    name = ""
    for key, value in zip(tag_keys, tag_values):
        if key == "name":
            name = value
            break

    type_name = _type_name(feature)

    nodes: List[NodeRef] = []
    if type_name == "way":
        nodes = [
            NodeRef(id=node.id, lon=node.lon, lat=node.lat)
            for node in feature.nodes
        ]

    return FeatureRecord(
        id=feature.id,
        type_name=type_name,
        name=name,
        lon=feature.lon,
        lat=feature.lat,
        tag_keys=tag_keys,
        tag_values=tag_values,
        nodes=nodes
    )


class GeoDeskEngine(FeatureEngine):
    """
    FeatureEngine backed by geodesk.Features.

    Thread Safety:
    - A store handle is a read-only geodesk.Features object
    - Whether concurrent queries on one handle are safe is up to geodesk
    """

    name = "geodesk"

    def open_store(self, path: str) -> Any:
        """
        Open a GOL file.

        Args:
            path: Filesystem path to a .gol file

        Returns:
            geodesk.Features covering the whole store

        Raises:
            OpenFailure: library missing, file missing, or geodesk refused the file
        """
        if not os.path.isfile(path):
            raise OpenFailure(f"GOL file not found: {path}", path=path)

        geodesk = _import_geodesk()

        try:
            store = geodesk.Features(path)
        except Exception as e:
            raise OpenFailure(f"geodesk could not open '{path}': {e}", path=path) from e

        logger.info(f"Opened GOL store '{path}'")
        return store

    def run_query(
        self,
        store: Any,
        query: str,
        west: float,
        south: float,
        east: float,
        north: float
    ) -> GeoDeskResult:
        """
        Run a GOQL query inside a bounding box and snapshot the matches.

        Raises:
            QueryFailure: geodesk rejected the query or failed while evaluating it
        """
        geodesk = _import_geodesk()

        try:
            box = geodesk.Box(west=west, south=south, east=east, north=north)
            matches = store(query)(box)
            records = [feature_to_record(feature) for feature in matches]
        except Exception as e:
            raise QueryFailure(f"geodesk rejected query '{query}': {e}", query=query) from e

        logger.debug(f"Query '{query}' captured {len(records)} features")
        return GeoDeskResult(query=query, records=records)

    def result_count(self, result: GeoDeskResult) -> int:
        return len(result.records)

    def result_materialize(self, result: GeoDeskResult) -> List[FeatureRecord]:
        return [record.model_copy(deep=True) for record in result.records]
