# ============================================================================
# CLAUDE CONTEXT - IN-MEMORY ENGINE
# ============================================================================
# STATUS: Adapter - pure-Python engine over JSON feature files
# PURPOSE: Run the facade without the native engine (tests, fixtures, demos)
# EXPORTS: InMemoryEngine, MemoryStore, MemoryResult, MemoryFeature, parse_query
# INTERFACES: FeatureEngine
# PYDANTIC_MODELS: MemoryFeature
# DEPENDENCIES: pydantic, json, re
# SOURCE: JSON file holding a list of features (or {"features": [...]})
# SCOPE: GOQL subset - type prefix plus [k], [!k], [k=v,...], [k!=v,...] clauses
# PATTERNS: Adapter Pattern, In-memory fake
# ENTRY_POINTS: engine = InMemoryEngine(); store = engine.open_store("fixture.json")
# ============================================================================

"""
In-Memory Engine

Loads every feature of a JSON file up front and answers queries with a
linear scan. Matches come back in file order, so repeated queries are
fully deterministic.

Feature file entries:

    {
        "id": 101,
        "type": "node",                  # or "type_name"; node, way, relation
        "lon": -73.6, "lat": 45.5,
        "name": "Chez Nous",             # optional, defaults to the first name tag
        "tags": {"amenity": "restaurant"},   # or [["amenity", "restaurant"], ...]
        "area": false,                   # optional, marks closed ways / multipolygons
        "nodes": [{"id": 1, "lon": ..., "lat": ...}]   # optional, ways only
    }

Supported query language:

    selector   := types? clause*
    types      := "*" | one or more of n w a r
    clause     := "[" key "]" | "[!" key "]"
                | "[" key "=" values "]" | "[" key "!=" values "]"
    values     := value ("," value)*

A missing type prefix matches every type. Ways and relations flagged as
areas match `a` and not `w`/`r`.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from util_logger import LoggerFactory, ComponentType

from .engine import FeatureEngine
from .errors import OpenFailure, QueryFailure
from .models import BoundingBox, FeatureRecord, NodeRef

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "InMemoryEngine")

_SELECTOR_RE = re.compile(r"^\s*(\*|[nwar]+)?\s*((?:\[[^\[\]]*\]\s*)*)$")
_CLAUSE_RE = re.compile(r"\[([^\[\]]*)\]")
_KEY_RE = re.compile(r"^[A-Za-z_][\w:.\-]*$")

Predicate = Callable[["MemoryFeature"], bool]


# ============================================================================
# FEATURE FILE MODEL
# ============================================================================

class MemoryFeature(BaseModel):
    """One feature as stored in a JSON feature file."""
    id: int
    type_name: str = Field(validation_alias=AliasChoices("type_name", "type"))
    name: Optional[str] = None
    lon: float
    lat: float
    tags: List[Tuple[str, str]] = Field(default_factory=list)
    area: bool = False
    nodes: List[NodeRef] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> Any:
        """Accept a mapping as well as a list of pairs; values become strings."""
        if isinstance(v, Mapping):
            v = list(v.items())
        if isinstance(v, list):
            return [
                (str(item[0]), str(item[1]))
                if isinstance(item, (list, tuple)) and len(item) == 2 else item
                for item in v
            ]
        return v

    def tag(self, key: str) -> Optional[str]:
        for k, v in self.tags:
            if k == key:
                return v
        return None

    def matches_type(self, types: str) -> bool:
        if self.type_name == "node":
            return "n" in types
        if self.area:
            return "a" in types
        if self.type_name == "way":
            return "w" in types
        if self.type_name == "relation":
            return "r" in types
        return False

    def within(self, bbox: BoundingBox) -> bool:
        if bbox.contains(self.lon, self.lat):
            return True
        return any(bbox.contains(node.lon, node.lat) for node in self.nodes)

    def to_record(self) -> FeatureRecord:
        name = self.name if self.name is not None else (self.tag("name") or "")
        return FeatureRecord(
            id=self.id,
            type_name=self.type_name,
            name=name,
            lon=self.lon,
            lat=self.lat,
            tag_keys=[k for k, _ in self.tags],
            tag_values=[v for _, v in self.tags],
            nodes=list(self.nodes)
        )


# ============================================================================
# QUERY PARSING
# ============================================================================

def _parse_values(raw: str, query: str) -> frozenset:
    values = []
    for part in raw.split(","):
        value = part.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        if not value:
            raise QueryFailure(f"Empty value in query '{query}'", query=query)
        values.append(value)
    return frozenset(values)


def _parse_key(raw: str, query: str) -> str:
    key = raw.strip()
    if not _KEY_RE.match(key):
        raise QueryFailure(f"Invalid tag key '{key}' in query '{query}'", query=query)
    return key


def _parse_clause(body: str, query: str) -> Predicate:
    text = body.strip()
    if not text:
        raise QueryFailure(f"Empty clause in query '{query}'", query=query)

    if "!=" in text:
        raw_key, raw_values = text.split("!=", 1)
        key = _parse_key(raw_key, query)
        values = _parse_values(raw_values, query)
        return lambda f: f.tag(key) not in values

    if "=" in text:
        raw_key, raw_values = text.split("=", 1)
        key = _parse_key(raw_key, query)
        values = _parse_values(raw_values, query)
        return lambda f: f.tag(key) in values

    if text.startswith("!"):
        key = _parse_key(text[1:], query)
        return lambda f: f.tag(key) is None

    key = _parse_key(text, query)
    return lambda f: f.tag(key) is not None


def parse_query(query: str) -> Tuple[str, List[Predicate]]:
    """
    Parse a query string into a type set and tag predicates.

    Args:
        query: Query-language string, e.g. "na[amenity=bar,pub]"

    Returns:
        (types, predicates) where types is a string of n/w/a/r letters

    Raises:
        QueryFailure: The string is not in the supported subset
    """
    if not query or not query.strip():
        raise QueryFailure("Query string is empty", query=query)

    match = _SELECTOR_RE.match(query)
    if not match:
        raise QueryFailure(f"Malformed query '{query}'", query=query)

    prefix, clauses = match.group(1), match.group(2)
    types = "nwar" if prefix in (None, "*") else prefix
    predicates = [_parse_clause(body, query) for body in _CLAUSE_RE.findall(clauses)]
    return types, predicates


# ============================================================================
# ENGINE
# ============================================================================

@dataclass
class MemoryStore:
    """Store handle: the path it came from and every feature in file order."""
    path: str
    features: List[MemoryFeature] = field(default_factory=list)


@dataclass
class MemoryResult:
    """Self-contained result handle."""
    query: str
    records: List[FeatureRecord] = field(default_factory=list)


class InMemoryEngine(FeatureEngine):
    """
    FeatureEngine over JSON feature files.

    Keeps a record of released handles so callers can check that stores and
    results are freed.
    """

    name = "memory"

    def __init__(self):
        self.released_stores: List[str] = []
        self.released_results = 0

    def open_store(self, path: str) -> MemoryStore:
        """
        Load a JSON feature file.

        Raises:
            OpenFailure: file missing, unreadable, or not a valid feature file
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise OpenFailure(f"Feature file not found: {path}", path=path) from e
        except (OSError, ValueError) as e:
            raise OpenFailure(f"Cannot read feature file '{path}': {e}", path=path) from e

        if isinstance(payload, Mapping):
            payload = payload.get("features")
        if not isinstance(payload, list):
            raise OpenFailure(
                f"Feature file '{path}' must hold a list of features or a 'features' list",
                path=path
            )

        try:
            features = [MemoryFeature.model_validate(item) for item in payload]
        except ValidationError as e:
            raise OpenFailure(f"Invalid feature in '{path}': {e}", path=path) from e

        logger.info(f"Loaded {len(features)} features from '{path}'")
        return MemoryStore(path=path, features=features)

    def run_query(
        self,
        store: MemoryStore,
        query: str,
        west: float,
        south: float,
        east: float,
        north: float
    ) -> MemoryResult:
        """
        Scan the store for features matching query inside the box.

        Raises:
            QueryFailure: unsupported query or south > north
        """
        types, predicates = parse_query(query)

        if south > north:
            raise QueryFailure(
                f"Bounding box south ({south}) is greater than north ({north})",
                query=query
            )
        bbox = BoundingBox(west, south, east, north)

        records = [
            feature.to_record()
            for feature in store.features
            if feature.matches_type(types)
            and all(predicate(feature) for predicate in predicates)
            and feature.within(bbox)
        ]

        logger.debug(f"Query '{query}' matched {len(records)} of {len(store.features)} features")
        return MemoryResult(query=query, records=records)

    def result_count(self, result: MemoryResult) -> int:
        return len(result.records)

    def result_materialize(self, result: MemoryResult) -> List[FeatureRecord]:
        return [record.model_copy(deep=True) for record in result.records]

    def release_store(self, store: MemoryStore) -> None:
        self.released_stores.append(store.path)

    def release_result(self, result: MemoryResult) -> None:
        self.released_results += 1
