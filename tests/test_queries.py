import pytest

from golquery import queries


@pytest.mark.parametrize("amenity,expected", [
    ("restaurant", "na[amenity=restaurant]"),
    ("cafe", "na[amenity=cafe]"),
    ("bicycle_parking", "na[amenity=bicycle_parking]"),
])
def test_amenity_query(amenity, expected):
    assert queries.amenity_query(amenity) == expected


def test_presets_cover_every_helper():
    assert queries.PRESETS == {
        "amenities": "na[amenity]",
        "restaurants": "na[amenity=restaurant]",
        "cafes": "na[amenity=cafe]",
        "bars": "na[amenity=bar,pub]",
        "bus-stops": "na[highway=bus_stop]",
        "roads": "w[highway]",
    }
