# ============================================================================
# CLAUDE CONTEXT - FEATURE STORE
# ============================================================================
# STATUS: Core Repository - entry point for every query
# PURPOSE: Own an opened store, execute queries, hand out QueryResult handles
# EXPORTS: FeatureStore, QueryResult
# INTERFACES: FeatureEngine (golquery.engine)
# PYDANTIC_MODELS: Feature
# DEPENDENCIES: pydantic, weakref, time, os, util_logger
# SOURCE: Any FeatureEngine adapter (geodesk, memory)
# SCOPE: Store lifecycle, query execution, result counting and materialization
# VALIDATION: Path encoding checks, engine record validation
# PATTERNS: Repository Pattern, Single-owner resource handles
# ENTRY_POINTS: with FeatureStore.open("planet.gol") as store: store.query_restaurants(bbox)
# ============================================================================

"""
Feature Store Repository

FeatureStore wraps one engine store handle; QueryResult wraps one engine
result handle. Both release their handle exactly once: at the end of a
`with` block, or when the object is garbage collected, whichever comes
first. There is no explicit close().

Query flow:

    store = FeatureStore.open(path)               # OpenFailure / InvalidPath
    result = store.query("w[highway]", bbox)      # QueryFailure
    result.count()                                # cheap, never re-runs the query
    result.materialize()                          # MaterializeFailure, retryable

Every call is synchronous. Nothing is cached between calls: each helper
issues a fresh query and each materialize() re-copies the records.

Thread Safety:
- The store is never mutated after open; concurrent queries are as safe as
  the underlying engine's concurrent readers
- Features returned by materialize() are plain immutable values
"""

import os
import time
import weakref
from typing import Any, Dict, List, Optional, Union

from util_logger import LoggerFactory, ComponentType, LogContext, log_memory_checkpoint

from . import queries
from .config import GolQueryConfig, get_golquery_config
from .engine import FeatureEngine, get_engine
from .errors import GolQueryError, InvalidPath, MaterializeFailure, OpenFailure, QueryFailure
from .models import BoundingBox, Feature

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "FeatureStore")
path_logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "StorePath")

PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


def _resolve_path(path: Any) -> str:
    """
    Convert a caller-supplied path into the string form engines accept.

    Raises:
        InvalidPath: not a path, or not representable as UTF-8
    """
    try:
        raw = os.fspath(path)
    except TypeError as e:
        raise InvalidPath(f"Not a filesystem path: {path!r}") from e

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPath(f"Path is not valid UTF-8: {raw!r}") from e

    try:
        raw.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidPath(f"Path cannot be encoded as UTF-8: {raw!r}") from e

    return raw


# ============================================================================
# QUERY RESULT
# ============================================================================

class QueryResult:
    """
    Owned handle to the matches of one (query, bounding box) pair.

    The engine evaluated the query when this object was created; count() only
    reads that state. materialize() copies the matches into Feature values on
    every call.
    """

    def __init__(
        self,
        engine: FeatureEngine,
        handle: Any,
        query: str,
        bbox: BoundingBox,
        log_dims: Optional[Dict[str, Any]] = None,
        debug_mode: Optional[bool] = None
    ):
        self._engine = engine
        self._handle = handle
        self.query = query
        self.bbox = bbox
        self._debug_mode = debug_mode
        self._log_dims = dict(log_dims or {})
        self._log_dims['query'] = query
        self._finalizer = weakref.finalize(self, engine.release_result, handle)

    def __enter__(self) -> "QueryResult":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._finalizer()

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"QueryResult(query={self.query!r}, bbox={self.bbox!r})"

    def _live_handle(self) -> Any:
        if not self._finalizer.alive:
            raise MaterializeFailure(
                f"Result for '{self.query}' has already been released",
                query=self.query
            )
        return self._handle

    def count(self) -> int:
        """Number of matches, as established when the query ran."""
        return int(self._engine.result_count(self._live_handle()))

    def is_empty(self) -> bool:
        return self.count() == 0

    def materialize(self) -> List[Feature]:
        """
        Copy every match into a new list of Feature values.

        The list has count() entries. Nothing is cached: a second call
        copies again, and a failed call may simply be retried.

        Returns:
            Features in engine emission order

        Raises:
            MaterializeFailure: the engine failed while copying, or emitted
                a record that does not fit the Feature model
        """
        handle = self._live_handle()

        try:
            records = self._engine.result_materialize(handle)
            features = [Feature.from_record(record) for record in records]
        except GolQueryError as e:
            logger.error(
                f"Materialize failed for '{self.query}': {e}",
                extra={'custom_dimensions': {**self._log_dims, **e.to_dict()}}
            )
            raise
        except Exception as e:
            error = MaterializeFailure(f"Materialize failed for '{self.query}': {e}", query=self.query)
            logger.error(
                error.message,
                extra={'custom_dimensions': {**self._log_dims, **error.to_dict()}}
            )
            raise error from e

        log_memory_checkpoint(
            logger,
            "After materialize",
            debug_mode=self._debug_mode,
            query=self.query,
            feature_count=len(features)
        )
        return features

    def to_feature_collection(self) -> Dict[str, Any]:
        """
        Materialize the result as a GeoJSON FeatureCollection dict.

        Raises:
            MaterializeFailure: see materialize()
        """
        features = self.materialize()
        return {
            'type': 'FeatureCollection',
            'numberMatched': self.count(),
            'numberReturned': len(features),
            'bbox': list(self.bbox.as_tuple()),
            'features': [feature.to_geojson() for feature in features]
        }


# ============================================================================
# FEATURE STORE
# ============================================================================

class FeatureStore:
    """
    Exclusively owned handle to an opened, read-only feature store.

    Create with FeatureStore.open(); queries borrow the store and never
    modify it.
    """

    def __init__(self, engine: FeatureEngine, handle: Any, path: str, debug_mode: Optional[bool] = None):
        """
        Wrap an already opened engine handle. Use FeatureStore.open() instead.

        Args:
            engine: Engine that produced the handle
            handle: Engine store handle
            path: Path the store was opened from
            debug_mode: Memory checkpoints on materialize; None reads the configuration
        """
        self._engine = engine
        self._handle = handle
        self.path = path
        self._debug_mode = debug_mode
        self._log_dims = LogContext(store_path=path, engine=engine.name).to_dict()
        self._finalizer = weakref.finalize(self, engine.release_store, handle)

    @classmethod
    def open(
        cls,
        path: PathLike,
        engine: Optional[Union[FeatureEngine, str]] = None,
        config: Optional[GolQueryConfig] = None
    ) -> "FeatureStore":
        """
        Open a store file.

        Args:
            path: Store path (str, bytes or os.PathLike)
            engine: Engine instance or registry name; defaults to config.engine
            config: Configuration (uses singleton if not provided)

        Returns:
            FeatureStore owning the engine handle

        Raises:
            InvalidPath: path cannot be represented as a UTF-8 string
            OpenFailure: unknown engine name, or the engine could not open the store
        """
        try:
            resolved = _resolve_path(path)
        except InvalidPath as e:
            path_logger.error(f"Rejected store path: {e}", extra={'custom_dimensions': e.to_dict()})
            raise

        if engine is None:
            config = config or get_golquery_config()
            engine = config.engine

        if not isinstance(engine, FeatureEngine):
            try:
                engine = get_engine(engine)
            except ValueError as e:
                error = OpenFailure(f"Failed to open store '{resolved}': {e}", path=resolved)
                logger.error(error.message, extra={'custom_dimensions': error.to_dict()})
                raise error from e

        debug_mode = config.debug_mode if config is not None else None
        dims = LogContext(store_path=resolved, engine=engine.name).to_dict()

        try:
            handle = engine.open_store(resolved)
        except GolQueryError as e:
            logger.error(f"Failed to open store '{resolved}': {e}", extra={'custom_dimensions': {**dims, **e.to_dict()}})
            raise
        except Exception as e:
            error = OpenFailure(f"Failed to open store '{resolved}': {e}", path=resolved)
            logger.error(error.message, extra={'custom_dimensions': {**dims, **error.to_dict()}})
            raise error from e

        logger.info(f"Opened store '{resolved}' with engine '{engine.name}'", extra={'custom_dimensions': dims})
        return cls(engine, handle, resolved, debug_mode=debug_mode)

    def __enter__(self) -> "FeatureStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._finalizer.alive:
            self._finalizer()
            logger.info(f"Released store '{self.path}'", extra={'custom_dimensions': self._log_dims})

    def __repr__(self) -> str:
        return f"FeatureStore(path={self.path!r}, engine={self._engine.name!r})"

    @property
    def engine_name(self) -> str:
        return self._engine.name

    # ========================================================================
    # QUERY EXECUTION
    # ========================================================================

    def _execute(self, query: str, bbox: BoundingBox) -> QueryResult:
        if not self._finalizer.alive:
            raise OpenFailure(f"Store '{self.path}' has already been released", path=self.path)

        dims = {**self._log_dims, 'query': query, 'bbox': list(bbox.as_tuple())}
        start = time.perf_counter()

        try:
            handle = self._engine.run_query(
                self._handle,
                query,
                bbox.west,
                bbox.south,
                bbox.east,
                bbox.north
            )
        except GolQueryError as e:
            logger.error(f"Query '{query}' failed: {e}", extra={'custom_dimensions': {**dims, **e.to_dict()}})
            raise
        except Exception as e:
            error = QueryFailure(f"Query '{query}' failed: {e}", query=query)
            logger.error(error.message, extra={'custom_dimensions': {**dims, **error.to_dict()}})
            raise error from e

        result = QueryResult(self._engine, handle, query, bbox, self._log_dims, debug_mode=self._debug_mode)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            f"Query '{query}' matched {result.count()} features",
            extra={'custom_dimensions': {**dims, 'duration_ms': duration_ms}}
        )
        return result

    def query(self, goql_query: str, bbox: BoundingBox) -> QueryResult:
        """
        Run a raw query-language string inside a bounding box.

        The string is passed to the engine untouched.

        Args:
            goql_query: Query string, e.g. "w[highway=motorway]"
            bbox: Region the matches must fall in

        Returns:
            QueryResult owned by the caller

        Raises:
            QueryFailure: the engine rejected the query or box
        """
        return self._execute(goql_query, bbox)

    def query_amenities(self, amenity_type: str, bbox: BoundingBox) -> QueryResult:
        """
        Query nodes and areas whose amenity tag equals amenity_type.

        Equivalent to query("na[amenity=<amenity_type>]", bbox). Only the
        amenity key is supported here; use query() for other tags.

        Args:
            amenity_type: Amenity value (e.g., "restaurant", "cafe", "bar")
            bbox: The bounding box to search within
        """
        return self._execute(queries.amenity_query(amenity_type), bbox)

    # ========================================================================
    # CONVENIENCE HELPERS
    # ========================================================================

    def query_all_amenities(self, bbox: BoundingBox) -> QueryResult:
        """Query all amenities within a bounding box (any type)."""
        return self.query(queries.ALL_AMENITIES, bbox)

    def query_restaurants(self, bbox: BoundingBox) -> QueryResult:
        return self.query_amenities(queries.RESTAURANT, bbox)

    def query_cafes(self, bbox: BoundingBox) -> QueryResult:
        return self.query_amenities(queries.CAFE, bbox)

    def query_bars(self, bbox: BoundingBox) -> QueryResult:
        """Query bars and pubs within a bounding box."""
        return self.query(queries.BARS_AND_PUBS, bbox)

    def query_bus_stops(self, bbox: BoundingBox) -> QueryResult:
        return self.query(queries.BUS_STOPS, bbox)

    def query_roads(self, bbox: BoundingBox) -> QueryResult:
        """Query ways tagged highway within a bounding box."""
        return self.query(queries.ROADS, bbox)
