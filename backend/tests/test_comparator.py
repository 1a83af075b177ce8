import pytest

from parcelgeo.core.config import Settings
from parcelgeo.services.geometry import (
    check_polygon_overlap,
    polygon_similarity,
    calculate_polygon_similarity,
    scan_overlaps,
)

from conftest import ORIGIN_LAT, ORIGIN_LNG, square_polygon


def shifted(size_m, east_m=0.0, north_m=0.0):
    return square_polygon(ORIGIN_LNG, ORIGIN_LAT, size_m, east_m, north_m)


def candidate(listing_id, geojson, title=None):
    return {"listing_id": listing_id, "listing_title": title or f"Listing {listing_id}", "geojson": geojson}


class TestCheckPolygonOverlap:
    def test_identical_polygons(self, parcel):
        result = check_polygon_overlap(parcel, parcel)

        assert result.overlaps
        assert result.overlap_percentage == pytest.approx(100, abs=0.01)
        assert result.overlap_area_m2 == pytest.approx(10_000, rel=0.02)
        assert result.error is None

    def test_disjoint_polygons(self, parcel):
        result = check_polygon_overlap(parcel, shifted(100, east_m=500))

        assert not result.overlaps
        assert result.overlap_area_m2 is None
        assert result.overlap_percentage is None

    def test_shared_edge_is_not_an_overlap(self):
        west = {"type": "Polygon", "coordinates": [[
            [39.280, -6.800], [39.281, -6.800], [39.281, -6.799], [39.280, -6.799], [39.280, -6.800],
        ]]}
        east = {"type": "Polygon", "coordinates": [[
            [39.281, -6.800], [39.282, -6.800], [39.282, -6.799], [39.281, -6.799], [39.281, -6.800],
        ]]}

        result = check_polygon_overlap(west, east)

        assert not result.overlaps
        assert result.error is None

    def test_percentage_is_relative_to_first_polygon(self, parcel):
        inner = shifted(50, east_m=25, north_m=25)

        assert check_polygon_overlap(inner, parcel).overlap_percentage == pytest.approx(100, abs=0.5)
        assert check_polygon_overlap(parcel, inner).overlap_percentage == pytest.approx(25, abs=0.5)

    def test_half_overlap(self, parcel):
        result = check_polygon_overlap(parcel, shifted(100, east_m=50))
        assert result.overlap_percentage == pytest.approx(50, abs=0.5)

    def test_invalid_input_is_reported(self, parcel):
        result = check_polygon_overlap({"type": "Point", "coordinates": [0, 0]}, parcel)

        assert not result.overlaps
        assert result.error


class TestPolygonSimilarity:
    def test_identical_polygons_score_100(self, parcel):
        result = polygon_similarity(parcel, parcel)

        assert result.score == 100
        assert result.area_similarity == pytest.approx(1)
        assert result.distance_similarity == pytest.approx(1)
        assert result.overlap_similarity == pytest.approx(1, abs=0.001)

    def test_half_shifted_copy_is_likely_duplicate(self, parcel):
        score = calculate_polygon_similarity(parcel, shifted(100, east_m=50))
        assert 70 <= score <= 75

    def test_distant_copy_keeps_only_area_component(self, parcel):
        result = polygon_similarity(parcel, shifted(100, east_m=10_000))

        assert result.distance_similarity == 0
        assert result.overlap_similarity == 0
        assert 29 <= result.score <= 30

    def test_distant_polygon_of_different_size_scores_zero(self, parcel):
        assert calculate_polygon_similarity(parcel, shifted(5_000, east_m=50_000)) == 0

    def test_invalid_input_scores_zero(self, parcel):
        result = polygon_similarity(parcel, {"type": "Polygon", "coordinates": []})

        assert result.score == 0
        assert result.error

    def test_weights_come_from_settings(self, parcel):
        overlap_only = Settings(
            similarity_area_weight=0.0,
            similarity_distance_weight=0.0,
            similarity_overlap_weight=1.0,
        )
        result = polygon_similarity(parcel, shifted(100, east_m=50), settings=overlap_only)
        assert result.score == pytest.approx(50, abs=1)


class TestScanOverlaps:
    def test_no_candidates(self, parcel):
        result = scan_overlaps(parcel, [])

        assert result == {
            "can_proceed": True,
            "has_overlaps": False,
            "max_overlap_percentage": 0,
            "overlapping_properties": [],
            "message": "No overlaps detected.",
        }

    def test_minor_overlap_is_reported_but_allowed(self, parcel):
        result = scan_overlaps(parcel, [candidate("a", shifted(100, east_m=90), "Plot A")])

        assert result["can_proceed"]
        assert result["has_overlaps"]
        assert result["max_overlap_percentage"] == pytest.approx(10, abs=0.5)
        assert result["message"].startswith("Warning: Minor overlap detected")

        reported = result["overlapping_properties"][0]
        assert reported["listing_id"] == "a"
        assert reported["listing_title"] == "Plot A"
        assert isinstance(reported["overlap_area_m2"], int)

    def test_overlap_below_report_threshold_is_ignored(self, parcel):
        result = scan_overlaps(parcel, [candidate("a", shifted(100, east_m=99.5))])

        assert result["can_proceed"]
        assert not result["has_overlaps"]
        assert result["overlapping_properties"] == []

    def test_overlap_above_block_threshold_blocks(self, parcel):
        result = scan_overlaps(parcel, [
            candidate("minor", shifted(100, east_m=90)),
            candidate("same", parcel),
        ])

        assert not result["can_proceed"]
        assert result["max_overlap_percentage"] == pytest.approx(100, abs=0.1)
        assert "cannot overlap more than 20%" in result["message"]
        assert [o["listing_id"] for o in result["overlapping_properties"]] == ["same", "minor"]

    def test_at_most_five_reported(self, parcel):
        candidates = [candidate(str(i), shifted(100, east_m=10 * i)) for i in range(8)]
        result = scan_overlaps(parcel, candidates)

        percentages = [o["overlap_percentage"] for o in result["overlapping_properties"]]
        assert len(percentages) == 5
        assert percentages == sorted(percentages, reverse=True)

    def test_far_and_malformed_candidates_are_skipped(self, parcel):
        result = scan_overlaps(parcel, [
            candidate("far", shifted(100, east_m=5_000)),
            candidate("broken", {"type": "Polygon", "coordinates": [[[0, 0]]]}),
            candidate("none", None),
            candidate("hit", shifted(100, east_m=50)),
        ])

        assert [o["listing_id"] for o in result["overlapping_properties"]] == ["hit"]

    def test_missing_title_gets_placeholder(self, parcel):
        result = scan_overlaps(parcel, [{"listing_id": "a", "listing_title": None, "geojson": parcel}])
        assert result["overlapping_properties"][0]["listing_title"] == "Unknown Property"

    def test_invalid_new_polygon_raises(self):
        with pytest.raises(ValueError):
            scan_overlaps({"type": "Point", "coordinates": [0, 0]}, [])
