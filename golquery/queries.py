# ============================================================================
# CLAUDE CONTEXT - QUERY TEMPLATES
# ============================================================================
# STATUS: Service - canonical query strings for the convenience helpers
# PURPOSE: Pure string composition; never touches an engine
# EXPORTS: amenity_query, ALL_AMENITIES, BARS_AND_PUBS, BUS_STOPS, ROADS, RESTAURANT, CAFE, PRESETS
# DEPENDENCIES: typing
# PATTERNS: Query Builder
# ENTRY_POINTS: from golquery.queries import amenity_query
# ============================================================================

"""
Canonical query strings used by FeatureStore's convenience helpers.

    all amenities   na[amenity]
    restaurants     na[amenity=restaurant]   (amenity-typed)
    cafes           na[amenity=cafe]         (amenity-typed)
    bars/pubs       na[amenity=bar,pub]
    bus stops       na[highway=bus_stop]
    roads           w[highway]
"""

from typing import Dict

ALL_AMENITIES = "na[amenity]"
BARS_AND_PUBS = "na[amenity=bar,pub]"
BUS_STOPS = "na[highway=bus_stop]"
ROADS = "w[highway]"

RESTAURANT = "restaurant"
CAFE = "cafe"


def amenity_query(amenity_type: str) -> str:
    """
    Build the node-or-area query for one amenity value.

    The value is inserted verbatim. It is not escaped, so a value holding
    query-language metacharacters changes the meaning of the query.

    Args:
        amenity_type: Amenity tag value, e.g. "restaurant"

    Returns:
        "na[amenity=<amenity_type>]"
    """
    return f"na[amenity={amenity_type}]"


# Command-line preset name -> query string
PRESETS: Dict[str, str] = {
    "amenities": ALL_AMENITIES,
    "restaurants": amenity_query(RESTAURANT),
    "cafes": amenity_query(CAFE),
    "bars": BARS_AND_PUBS,
    "bus-stops": BUS_STOPS,
    "roads": ROADS,
}
