# ============================================================================
# CLAUDE CONTEXT - GOLQUERY PACKAGE
# ============================================================================
# STATUS: Package root - public API of the feature store facade
# PURPOSE: Query a read-only OpenStreetMap feature store inside bounding boxes
# EXPORTS: FeatureStore, QueryResult, BoundingBox, Feature, NodeRef, errors, FeatureEngine, get_engine
# DEPENDENCIES: pydantic, pydantic-settings, psutil; geodesk (optional)
# ENTRY_POINTS: from golquery import FeatureStore, BoundingBox
# ============================================================================

"""
golquery - Feature Store Facade

Opens a pre-built, read-only feature store (a GeoDESK GOL file, or a JSON
feature file for the in-memory engine) and runs compact query-language
strings inside a bounding box.

Architecture:
    golquery/
    ├── models.py          # BoundingBox, Feature, NodeRef, FeatureRecord
    ├── errors.py          # InvalidPath, OpenFailure, QueryFailure, MaterializeFailure
    ├── engine.py          # FeatureEngine contract + registry
    ├── geodesk_engine.py  # GeoDESK adapter
    ├── memory_engine.py   # JSON-backed engine
    ├── queries.py         # Canonical query strings
    ├── store.py           # FeatureStore, QueryResult
    ├── config.py          # Environment-based configuration
    └── cli.py             # python -m golquery

Usage:
    from golquery import FeatureStore, BoundingBox

    montreal = BoundingBox(-73.9781, 45.4042, -73.4766, 45.7042)
    with FeatureStore.open("planet.gol") as store:
        restaurants = store.query_restaurants(montreal)
        print(f"Found {restaurants.count()} restaurants")
        for feature in restaurants.materialize()[:10]:
            print(feature.name, feature.tag("cuisine"))
"""

from .engine import FeatureEngine, get_engine
from .errors import GolQueryError, InvalidPath, MaterializeFailure, OpenFailure, QueryFailure
from .models import BoundingBox, Feature, FeatureRecord, NodeRef
from .store import FeatureStore, QueryResult

__version__ = "1.0.0"
__all__ = [
    "BoundingBox",
    "Feature",
    "FeatureEngine",
    "FeatureRecord",
    "FeatureStore",
    "GolQueryError",
    "InvalidPath",
    "MaterializeFailure",
    "NodeRef",
    "OpenFailure",
    "QueryFailure",
    "QueryResult",
    "get_engine",
]
