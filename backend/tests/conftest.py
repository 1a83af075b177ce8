import math

import pytest

# Dar es Salaam
ORIGIN_LNG = 39.28
ORIGIN_LAT = -6.80

METERS_PER_DEGREE = 111_320.0


def rectangle_polygon(lng, lat, width_m, height_m, east_m=0.0, north_m=0.0):
    """GeoJSON Polygon of a width x height rectangle whose south-west corner is offset from (lng, lat)."""
    deg_lng = METERS_PER_DEGREE * math.cos(math.radians(lat))
    min_lng = lng + east_m / deg_lng
    min_lat = lat + north_m / METERS_PER_DEGREE
    max_lng = min_lng + width_m / deg_lng
    max_lat = min_lat + height_m / METERS_PER_DEGREE
    return {
        "type": "Polygon",
        "coordinates": [[
            [min_lng, min_lat],
            [max_lng, min_lat],
            [max_lng, max_lat],
            [min_lng, max_lat],
            [min_lng, min_lat],
        ]],
    }


def square_polygon(lng, lat, size_m, east_m=0.0, north_m=0.0):
    return rectangle_polygon(lng, lat, size_m, size_m, east_m, north_m)


@pytest.fixture
def parcel():
    """100 m x 100 m parcel in Dar es Salaam."""
    return square_polygon(ORIGIN_LNG, ORIGIN_LAT, 100)
