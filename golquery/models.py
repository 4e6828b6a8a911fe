# ============================================================================
# CLAUDE CONTEXT - GOLQUERY MODELS
# ============================================================================
# STATUS: Foundation - value objects shared by every layer
# PURPOSE: Bounding box, feature/tag model and the engine record shape
# EXPORTS: BoundingBox, NodeRef, FeatureRecord, Feature
# PYDANTIC_MODELS: NodeRef, FeatureRecord, Feature
# DEPENDENCIES: pydantic, dataclasses, typing
# SOURCE: Records returned by a FeatureEngine (see golquery.engine)
# SCOPE: Immutable caller-facing values with no back-reference to store or result
# VALIDATION: Pydantic v2 validation of engine records
# PATTERNS: Value Objects, Data Transfer Objects
# ENTRY_POINTS: from golquery.models import BoundingBox, Feature
# ============================================================================

"""
Feature Store Models

BoundingBox is a plain frozen dataclass: four WGS84 degree coordinates,
never validated or normalized here. Whatever the engine does with an
inverted or antimeridian-crossing box is the engine's business.

FeatureRecord mirrors what an engine hands back for one match (parallel
tag key/value arrays). Feature is the caller-facing value built from it,
with tags unpacked into ordered (key, value) pairs. Duplicate keys are
kept; lookups return the first occurrence.

Date: 19 OCT 2026
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# BOUNDING BOX
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """
    Geographic filter in WGS84 degrees.

    Constructed unconditionally: west may exceed east and south may exceed
    north. Interpretation of such boxes is left to the engine.
    """
    west: float
    south: float
    east: float
    north: float

    @classmethod
    def new(cls, west: float, south: float, east: float, north: float) -> "BoundingBox":
        """Create a bounding box from its four edges."""
        return cls(west, south, east, north)

    @classmethod
    def from_center(cls, lon: float, lat: float, radius: float) -> "BoundingBox":
        """
        Create a bounding box around a center point.

        The radius is in degrees on both axes, so away from the equator the
        box is narrower on the ground east-west than north-south. It is not
        a true geographic radius.

        Args:
            lon: Center longitude in degrees
            lat: Center latitude in degrees
            radius: Half-width of the box in degrees

        Returns:
            BoundingBox(lon - radius, lat - radius, lon + radius, lat + radius)
        """
        return cls(
            west=lon - radius,
            south=lat - radius,
            east=lon + radius,
            north=lat + radius
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return (west, south, east, north)."""
        return (self.west, self.south, self.east, self.north)

    def contains(self, lon: float, lat: float) -> bool:
        """
        Check whether a coordinate falls inside the box (edges inclusive).

        A box with west > east is read as crossing the antimeridian.
        """
        if not self.south <= lat <= self.north:
            return False
        if self.west <= self.east:
            return self.west <= lon <= self.east
        return lon >= self.west or lon <= self.east


# ============================================================================
# ENGINE RECORD
# ============================================================================

class NodeRef(BaseModel):
    """One member node of a way: OSM id plus coordinate."""
    model_config = ConfigDict(frozen=True)

    id: int
    lon: float
    lat: float


class FeatureRecord(BaseModel):
    """
    One matched entity as emitted by an engine.

    tag_keys[i] pairs with tag_values[i]. Equal length and matching order
    are part of the engine contract and are not checked here.
    """
    id: int = Field(description="OSM id, unique within its type")
    type_name: str = Field(description="Engine classification (node, way, relation)")
    name: str = Field(default="", description="Value of the name tag, empty if absent")
    lon: float = Field(description="Representative longitude in degrees")
    lat: float = Field(description="Representative latitude in degrees")
    tag_keys: List[str] = Field(default_factory=list)
    tag_values: List[str] = Field(default_factory=list)
    nodes: List[NodeRef] = Field(
        default_factory=list,
        description="Member nodes for ways, empty when the engine does not report them"
    )


# ============================================================================
# FEATURE
# ============================================================================

class Feature(BaseModel):
    """
    Materialized, immutable view of one matched entity.

    Independent of the store and result it came from.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    type_name: str
    name: str = ""
    lon: float
    lat: float
    tags: Tuple[Tuple[str, str], ...] = ()
    nodes: Tuple[NodeRef, ...] = ()

    @classmethod
    def from_record(cls, record: Union[FeatureRecord, Mapping[str, Any]]) -> "Feature":
        """
        Build a Feature from an engine record.

        Tag arrays are paired by position, preserving emission order.
        """
        if not isinstance(record, FeatureRecord):
            record = FeatureRecord.model_validate(record)

        return cls(
            id=record.id,
            type_name=record.type_name,
            name=record.name,
            lon=record.lon,
            lat=record.lat,
            tags=tuple(zip(record.tag_keys, record.tag_values)),
            nodes=tuple(record.nodes)
        )

    def tag(self, key: str) -> Optional[str]:
        """Return the first value stored under key, or None."""
        for k, v in self.tags:
            if k == key:
                return v
        return None

    def has_tag(self, key: str) -> bool:
        """Check if a tag exists."""
        return any(k == key for k, _ in self.tags)

    def tag_dict(self) -> Dict[str, str]:
        """Tags as a dict; the first occurrence of a duplicate key wins."""
        result: Dict[str, str] = {}
        for k, v in self.tags:
            result.setdefault(k, v)
        return result

    def is_node(self) -> bool:
        return self.type_name == "node"

    def is_way(self) -> bool:
        return self.type_name == "way"

    def is_relation(self) -> bool:
        return self.type_name == "relation"

    def to_geojson(self) -> Dict[str, Any]:
        """
        Render as a GeoJSON Feature.

        Ways with at least two member nodes become LineStrings; everything
        else is a Point at the representative coordinate.
        """
        if self.is_way() and len(self.nodes) > 1:
            geometry = {
                'type': 'LineString',
                'coordinates': [[node.lon, node.lat] for node in self.nodes]
            }
        else:
            geometry = {
                'type': 'Point',
                'coordinates': [self.lon, self.lat]
            }

        return {
            'type': 'Feature',
            'id': self.id,
            'geometry': geometry,
            'properties': {
                'type_name': self.type_name,
                'name': self.name,
                'tags': self.tag_dict()
            }
        }
