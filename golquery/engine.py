# ============================================================================
# CLAUDE CONTEXT - ENGINE CAPABILITY
# ============================================================================
# STATUS: Core Interface - boundary between the facade and a query engine
# PURPOSE: Abstract the four engine operations so stores can run on any backend
# EXPORTS: FeatureEngine, get_engine
# INTERFACES: FeatureEngine (ABC)
# DEPENDENCIES: abc, typing, util_logger
# SOURCE: GeoDESK GOL files (geodesk_engine) or JSON fixtures (memory_engine)
# SCOPE: Engine contract only - no query parsing, no spatial indexing
# PATTERNS: Adapter Pattern, Registry/Factory
# ENTRY_POINTS: engine = get_engine("geodesk"); handle = engine.open_store(path)
# ============================================================================

"""
Feature Engine Capability

The facade never talks to a native engine directly. Everything goes
through four operations:

    open_store(path)                                  -> store handle
    run_query(store, query, west, south, east, north) -> result handle
    result_count(result)                              -> int
    result_materialize(result)                        -> list of records

Handles are opaque objects owned by the engine. A result handle must be
self-contained once returned: it stays valid after its store is released.

Adapters signal failures by raising the matching golquery.errors class.
Any other exception is translated by FeatureStore/QueryResult according
to the operation it escaped from.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Union

from util_logger import LoggerFactory, ComponentType

from .models import FeatureRecord

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "engine_registry")

RecordLike = Union[FeatureRecord, Mapping[str, Any]]


class FeatureEngine(ABC):
    """
    Abstract query engine over a read-only feature store.

    Subclasses set `name` and implement the four operations. The release
    hooks default to no-ops for engines whose handles need no cleanup.
    """

    name: str = "abstract"

    @abstractmethod
    def open_store(self, path: str) -> Any:
        """
        Open a store file.

        Raises:
            OpenFailure: missing file, format mismatch or corruption
        """

    @abstractmethod
    def run_query(
        self,
        store: Any,
        query: str,
        west: float,
        south: float,
        east: float,
        north: float
    ) -> Any:
        """
        Evaluate a query string inside a bounding box.

        Raises:
            QueryFailure: malformed query or rejected predicate/box
        """

    @abstractmethod
    def result_count(self, result: Any) -> int:
        """Number of matches held by a result handle."""

    @abstractmethod
    def result_materialize(self, result: Any) -> List[RecordLike]:
        """
        Copy every match out of a result handle.

        Raises:
            MaterializeFailure: copy or I/O failure
        """

    def release_store(self, store: Any) -> None:
        """Free engine-side resources held by a store handle."""

    def release_result(self, result: Any) -> None:
        """Free engine-side resources held by a result handle."""


def get_engine(name: str) -> FeatureEngine:
    """
    Create an engine adapter by name.

    Args:
        name: "geodesk" for GOL files, "memory" for JSON feature files

    Returns:
        New FeatureEngine instance

    Raises:
        ValueError: Unknown engine name
    """
    key = name.strip().lower()

    if key == "geodesk":
        from .geodesk_engine import GeoDeskEngine
        engine: FeatureEngine = GeoDeskEngine()
    elif key == "memory":
        from .memory_engine import InMemoryEngine
        engine = InMemoryEngine()
    else:
        raise ValueError(f"Unknown engine '{name}' - expected 'geodesk' or 'memory'")

    logger.debug(f"Created engine adapter '{engine.name}'")
    return engine
