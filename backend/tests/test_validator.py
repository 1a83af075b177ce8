import pytest

from parcelgeo.core.config import Settings
from parcelgeo.services.geometry import validate_polygon
from parcelgeo.services.geometry.kernel import geodesic_area, polygon_from_geojson

from conftest import ORIGIN_LAT, ORIGIN_LNG, rectangle_polygon, square_polygon


def test_valid_parcel(parcel):
    result = validate_polygon(parcel)

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []
    assert result.metrics.area_m2 == pytest.approx(10_000, rel=0.02)
    assert result.metrics.perimeter_m == pytest.approx(400, rel=0.02)
    assert result.metrics.num_vertices == 4
    assert result.metrics.is_convex


def test_centroid_is_lng_lat(parcel):
    lng, lat = validate_polygon(parcel).metrics.centroid
    assert lng == pytest.approx(ORIGIN_LNG, abs=0.01)
    assert lat == pytest.approx(ORIGIN_LAT, abs=0.01)


@pytest.mark.parametrize("geojson, error", [
    (None, "Invalid GeoJSON format"),
    ("not a polygon", "Invalid GeoJSON format"),
    ({"type": "Point", "coordinates": [39.28, -6.8]}, 'GeoJSON must be of type "Polygon"'),
    ({"type": "Polygon"}, "Missing or invalid coordinates array"),
    ({"type": "Polygon", "coordinates": [[[39.28, -6.8], [39.29, -6.8], [39.28, -6.8]]]},
     "Polygon must have at least 3 vertices"),
])
def test_structural_errors_return_early(geojson, error):
    result = validate_polygon(geojson)

    assert not result.is_valid
    assert result.errors == [error]
    assert result.metrics is None


def test_self_intersection_is_an_error():
    bowtie = {
        "type": "Polygon",
        "coordinates": [[
            [39.280, -6.800],
            [39.281, -6.799],
            [39.281, -6.800],
            [39.280, -6.799],
            [39.280, -6.800],
        ]],
    }
    result = validate_polygon(bowtie)

    assert not result.is_valid
    assert "Polygon has self-intersections (invalid geometry)" in result.errors


def test_area_below_minimum():
    tiny = square_polygon(ORIGIN_LNG, ORIGIN_LAT, 3.0)
    result = validate_polygon(tiny)

    assert not result.is_valid
    assert "Polygon area is too small (minimum 10 m²)" in result.errors


def test_area_just_above_minimum():
    small = square_polygon(ORIGIN_LNG, ORIGIN_LAT, 3.3)
    assert validate_polygon(small).is_valid


def squares_around_area(target_m2):
    """Squares whose geodesic area lies just below and at or just above target_m2."""
    below, above = 1.0, 10.0
    for _ in range(60):
        side = (below + above) / 2
        if geodesic_area(polygon_from_geojson(square_polygon(ORIGIN_LNG, ORIGIN_LAT, side))) < target_m2:
            below = side
        else:
            above = side
    return square_polygon(ORIGIN_LNG, ORIGIN_LAT, below), square_polygon(ORIGIN_LNG, ORIGIN_LAT, above)


def test_area_of_10_0001_m2_passes():
    _, polygon = squares_around_area(10.0001)
    result = validate_polygon(polygon)

    assert 10.0001 <= result.metrics.area_m2 < 10.01
    assert result.is_valid


def test_area_just_under_10_m2_fails():
    polygon, _ = squares_around_area(9.9999)
    result = validate_polygon(polygon)

    assert 9.99 < result.metrics.area_m2 < 9.9999
    assert not result.is_valid
    assert "Polygon area is too small (minimum 10 m²)" in result.errors


def test_very_large_area_is_only_a_warning():
    large = square_polygon(ORIGIN_LNG, ORIGIN_LAT, 11_000)
    result = validate_polygon(large)

    assert result.is_valid
    assert "Polygon area is very large (> 100 km²). Please verify." in result.warnings


def test_elongated_polygon_warns():
    strip = rectangle_polygon(ORIGIN_LNG, ORIGIN_LAT, 1000, 20)
    result = validate_polygon(strip)

    assert result.is_valid
    assert "Polygon has unusual elongation. Please verify boundaries." in result.warnings


def test_centroid_outside_country_warns():
    paris = square_polygon(2.35, 48.85, 100)
    result = validate_polygon(paris)

    assert result.is_valid
    assert "Polygon centroid is outside Tanzania boundaries" in result.warnings


def test_concave_polygon_is_not_convex():
    l_shape = {
        "type": "Polygon",
        "coordinates": [[
            [39.280, -6.800],
            [39.282, -6.800],
            [39.282, -6.799],
            [39.281, -6.799],
            [39.281, -6.798],
            [39.280, -6.798],
            [39.280, -6.800],
        ]],
    }
    result = validate_polygon(l_shape)

    assert result.is_valid
    assert result.metrics.num_vertices == 6
    assert not result.metrics.is_convex


def test_open_ring_is_reported_not_raised():
    parcel = square_polygon(ORIGIN_LNG, ORIGIN_LAT, 100)
    ring = parcel["coordinates"][0]
    ring[-1] = [ring[-1][0] + 0.001, ring[-1][1]]

    result = validate_polygon(parcel)

    assert not result.is_valid
    assert result.errors[0].startswith("Validation error:")


def test_thresholds_come_from_settings(parcel):
    strict = Settings(min_polygon_area_m2=20_000)
    result = validate_polygon(parcel, settings=strict)

    assert not result.is_valid
    assert "Polygon area is too small (minimum 20000 m²)" in result.errors


def test_to_dict_shape(parcel):
    data = validate_polygon(parcel).to_dict()
    assert set(data) == {"is_valid", "errors", "warnings", "metrics"}
    assert set(data["metrics"]) == {"area_m2", "perimeter_m", "centroid", "is_convex", "num_vertices"}
