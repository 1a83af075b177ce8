"""OSM (OpenStreetMap) amenity data access."""

from parcelgeo.services.osm.overpass_client import (
    AmenitySourceError,
    AmenitySourceTimeout,
    OverpassClient,
    get_overpass_client,
)
from parcelgeo.services.osm.amenity_cache import AmenityCache, get_amenity_cache

__all__ = [
    "AmenitySourceError",
    "AmenitySourceTimeout",
    "OverpassClient",
    "get_overpass_client",
    "AmenityCache",
    "get_amenity_cache",
]
