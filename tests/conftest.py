import json
import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path for direct pytest runs
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from golquery import BoundingBox, FeatureStore  # noqa: E402
from golquery.config import reset_golquery_config  # noqa: E402
from golquery.memory_engine import InMemoryEngine  # noqa: E402

MONTREAL = BoundingBox(-73.9781, 45.4042, -73.4766, 45.7042)
COPENHAGEN = BoundingBox(12.45, 55.61, 12.65, 55.73)
MID_ATLANTIC = BoundingBox(-40.0, 10.0, -39.0, 11.0)

FEATURES = [
    {
        "id": 101, "type": "node", "lon": -73.6, "lat": 45.5,
        "tags": {"amenity": "restaurant", "name": "Chez Nous", "cuisine": "french",
                 "phone": "+1 514 555 0101"},
    },
    {
        "id": 102, "type": "node", "lon": -73.58, "lat": 45.51,
        "tags": {"amenity": "cafe", "name": "Café Olimpico"},
    },
    {
        "id": 103, "type": "node", "lon": -73.57, "lat": 45.52,
        "tags": {"amenity": "bar", "name": "Le Bar"},
    },
    {
        "id": 104, "type": "way", "area": True, "lon": -73.56, "lat": 45.53,
        "tags": {"amenity": "pub", "building": "yes", "name": "The Pub"},
        "nodes": [
            {"id": 1041, "lon": -73.561, "lat": 45.529},
            {"id": 1042, "lon": -73.559, "lat": 45.529},
            {"id": 1043, "lon": -73.559, "lat": 45.531},
            {"id": 1041, "lon": -73.561, "lat": 45.529},
        ],
    },
    {
        "id": 105, "type": "node", "lon": -73.62, "lat": 45.49,
        "tags": {"highway": "bus_stop", "ref": "52345", "name": "Sherbrooke / Peel"},
    },
    {
        "id": 106, "type": "node", "lon": -73.61, "lat": 45.48,
        "tags": [["amenity", "restaurant"], ["note", "first"], ["note", "second"]],
    },
    {
        "id": 201, "type": "way", "lon": -73.65, "lat": 45.47,
        "tags": {"highway": "residential", "name": "Rue Saint-Denis"},
        "nodes": [
            {"id": 2011, "lon": -73.651, "lat": 45.469},
            {"id": 2012, "lon": -73.650, "lat": 45.470},
            {"id": 2013, "lon": -73.649, "lat": 45.471},
        ],
    },
    {
        "id": 202, "type": "way", "area": True, "lon": -73.59, "lat": 45.505,
        "tags": {"leisure": "park", "name": "Parc du Mont-Royal"},
    },
    {
        "id": 301, "type": "relation", "lon": -73.6, "lat": 45.6,
        "tags": {"type": "route", "route": "bus", "ref": "24"},
    },
    {
        "id": 401, "type": "node", "lon": 12.57, "lat": 55.68,
        "tags": {"amenity": "restaurant", "name": "Noma"},
    },
    {
        "id": 402, "type": "node", "lon": 12.55, "lat": 55.67,
        "tags": {"highway": "bus_stop", "name": "Rådhuspladsen"},
    },
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    for name in ("GOLQUERY_ENGINE", "GOLQUERY_GOL_PATH", "GOLQUERY_SAMPLE_LIMIT", "GOLQUERY_DEBUG_MODE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_golquery_config()
    yield
    reset_golquery_config()


@pytest.fixture
def feature_file(tmp_path) -> Path:
    path = tmp_path / "montreal.json"
    path.write_text(json.dumps(FEATURES), encoding="utf-8")
    return path


@pytest.fixture
def engine() -> InMemoryEngine:
    return InMemoryEngine()


@pytest.fixture
def store(feature_file, engine):
    with FeatureStore.open(feature_file, engine=engine) as opened:
        yield opened
