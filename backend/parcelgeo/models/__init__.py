from parcelgeo.db.base import Base  # noqa
from parcelgeo.models.administrative_unit import Region, District, Ward, StreetVillage  # noqa
from parcelgeo.models.listing import Listing, ListingPolygon  # noqa
from parcelgeo.models.proximity_analysis import ProximityAnalysis  # noqa

__all__ = [
    "Base",
    "Region",
    "District",
    "Ward",
    "StreetVillage",
    "Listing",
    "ListingPolygon",
    "ProximityAnalysis",
]
