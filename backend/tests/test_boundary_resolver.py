import json

import pytest

from parcelgeo.services.boundaries import AdminUnitRecord, BoundaryCatalog, BoundaryResolver
from parcelgeo.services.boundaries.catalog import DISTRICT, REGION, STREET_VILLAGE, WARD
from parcelgeo.services.boundaries.resolver import FIRST_MATCH, SMALLEST_AREA

from conftest import ORIGIN_LAT, ORIGIN_LNG, square_polygon


def area(size_m, east_m=0.0, north_m=0.0):
    """Square unit centered on the origin parcel unless offset."""
    return square_polygon(ORIGIN_LNG, ORIGIN_LAT, size_m, east_m - size_m / 2 + 50, north_m - size_m / 2 + 50)


class FakeCatalog(BoundaryCatalog):
    def __init__(self, units=None, error=None):
        self.units = units or {}
        self.error = error
        self.calls = []

    def fetch_units(self, level, parent_id=None):
        self.calls.append((level, parent_id))
        if self.error:
            raise self.error
        return self.units.get((level, parent_id), [])


@pytest.fixture
def hierarchy():
    return {
        (REGION, None): [
            AdminUnitRecord("r-far", "Arusha", area(10_000, east_m=200_000)),
            AdminUnitRecord("r-dar", "Dar es Salaam", area(50_000)),
        ],
        (DISTRICT, "r-dar"): [AdminUnitRecord("d-ila", "Ilala", area(20_000))],
        (WARD, "d-ila"): [AdminUnitRecord("w-kar", "Kariakoo", area(5_000))],
        (STREET_VILLAGE, "w-kar"): [AdminUnitRecord("s-msi", "Msimbazi", area(1_000))],
    }


def test_full_cascade(parcel, hierarchy):
    catalog = FakeCatalog(hierarchy)
    match = BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel)

    assert match.to_dict() == {
        "region_id": "r-dar",
        "district_id": "d-ila",
        "ward_id": "w-kar",
        "street_village_id": "s-msi",
    }
    assert catalog.calls == [
        (REGION, None),
        (DISTRICT, "r-dar"),
        (WARD, "d-ila"),
        (STREET_VILLAGE, "w-kar"),
    ]


def test_cascade_stops_at_first_unmatched_level(parcel, hierarchy):
    hierarchy[(WARD, "d-ila")] = [AdminUnitRecord("w-far", "Far", area(1_000, east_m=30_000))]
    catalog = FakeCatalog(hierarchy)

    match = BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel)

    assert match.region_id == "r-dar"
    assert match.district_id == "d-ila"
    assert match.ward_id is None
    assert match.street_village_id is None
    assert match.matched_levels == [REGION, DISTRICT]
    assert (STREET_VILLAGE, "w-far") not in catalog.calls
    assert len(catalog.calls) == 3


def test_no_region_match(parcel):
    catalog = FakeCatalog({(REGION, None): [AdminUnitRecord("r-far", "Far", area(1_000, east_m=100_000))]})
    match = BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel)

    assert match.to_dict() == {
        "region_id": None,
        "district_id": None,
        "ward_id": None,
        "street_village_id": None,
    }


def test_polygon_straddling_unit_border_matches_by_intersection(parcel):
    # unit lies east of the parcel centroid but overlaps its eastern half
    east_unit = square_polygon(ORIGIN_LNG, ORIGIN_LAT, 1_000, east_m=75)
    catalog = FakeCatalog({(REGION, None): [AdminUnitRecord("r-east", "East", east_unit)]})

    assert BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel).region_id == "r-east"


def test_malformed_and_empty_candidates_are_skipped(parcel):
    catalog = FakeCatalog({(REGION, None): [
        AdminUnitRecord("r-bad", "Broken", "{not json"),
        AdminUnitRecord("r-empty", "Empty", None),
        AdminUnitRecord("r-dar", "Dar es Salaam", area(50_000)),
    ]})

    assert BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel).region_id == "r-dar"


def test_json_string_geometry_is_accepted(parcel):
    catalog = FakeCatalog({(REGION, None): [AdminUnitRecord("r-dar", "Dar es Salaam", json.dumps(area(50_000)))]})
    assert BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel).region_id == "r-dar"


def test_catalog_failure_yields_empty_match(parcel):
    catalog = FakeCatalog(error=RuntimeError("connection lost"))
    match = BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel)

    assert match.matched_levels == []
    assert catalog.calls == [(REGION, None)]


def test_first_match_takes_catalog_order(parcel):
    catalog = FakeCatalog({(REGION, None): [
        AdminUnitRecord("r-big", "Big", area(50_000)),
        AdminUnitRecord("r-small", "Small", area(2_000)),
    ]})
    assert BoundaryResolver(catalog, FIRST_MATCH).resolve(parcel).region_id == "r-big"


def test_smallest_area_takes_innermost_unit(parcel):
    catalog = FakeCatalog({(REGION, None): [
        AdminUnitRecord("r-big", "Big", area(50_000)),
        AdminUnitRecord("r-small", "Small", area(2_000)),
    ]})
    assert BoundaryResolver(catalog, SMALLEST_AREA).resolve(parcel).region_id == "r-small"


@pytest.mark.parametrize("wrap", [
    lambda g: g,
    lambda g: {"type": "Feature", "properties": {}, "geometry": g},
    lambda g: {"geometry": g},
    json.dumps,
])
def test_input_forms(parcel, hierarchy, wrap):
    match = BoundaryResolver(FakeCatalog(hierarchy), FIRST_MATCH).resolve(wrap(parcel))
    assert match.street_village_id == "s-msi"


@pytest.mark.parametrize("bad", [None, "{oops", {"type": "Polygon", "coordinates": []}, {}])
def test_invalid_input_polygon_raises(bad):
    with pytest.raises(ValueError):
        BoundaryResolver(FakeCatalog(), FIRST_MATCH).resolve(bad)


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        BoundaryResolver(FakeCatalog(), "largest_area")


def test_catalog_without_fetch_units_cannot_be_instantiated():
    class IncompleteCatalog(BoundaryCatalog):
        pass

    with pytest.raises(TypeError):
        IncompleteCatalog()
