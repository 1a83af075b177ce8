"""Proximity analysis: nearest roads and amenities around a listing polygon."""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from parcelgeo.core.config import Settings, get_settings
from parcelgeo.services.geometry.kernel import bbox_center, haversine_distance_m
from parcelgeo.services.osm.amenity_cache import AmenityCache
from parcelgeo.services.osm.overpass_client import OverpassClient, get_overpass_client

logger = logging.getLogger(__name__)

ROADS = "roads"
HOSPITALS = "hospitals"
SCHOOLS = "schools"
MARKETPLACES = "marketplaces"
PUBLIC_TRANSPORT = "public_transport"

CATEGORIES = (ROADS, HOSPITALS, SCHOOLS, MARKETPLACES, PUBLIC_TRANSPORT)


class ProximityAnalysisError(RuntimeError):
    """Amenity data could not be turned into a proximity record."""


@dataclass
class ProximityItem:
    name: str
    distance: float  # meters from the search origin
    type: Optional[str] = None


@dataclass
class ProximityRecord:
    listing_id: str
    nearest_road_name: Optional[str] = None
    nearest_road_distance_m: Optional[float] = None
    nearest_major_road_name: Optional[str] = None
    nearest_major_road_distance_m: Optional[float] = None
    nearest_hospital_name: Optional[str] = None
    nearest_hospital_distance_m: Optional[float] = None
    nearest_school_name: Optional[str] = None
    nearest_school_distance_m: Optional[float] = None
    nearest_marketplace_name: Optional[str] = None
    nearest_marketplace_distance_m: Optional[float] = None
    roads_within_5km: List[Dict[str, Any]] = field(default_factory=list)
    hospitals_within_5km: List[Dict[str, Any]] = field(default_factory=list)
    schools_within_5km: List[Dict[str, Any]] = field(default_factory=list)
    marketplaces_within_5km: List[Dict[str, Any]] = field(default_factory=list)
    public_transport_nearby: List[Dict[str, Any]] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def element_point(element: Dict[str, Any]) -> Optional[tuple]:
    """
    Representative (lat, lon) of an Overpass element.

    Nodes carry their own coordinate; ways and relations need ``out center``.
    """
    if not isinstance(element, dict):
        return None
    if element.get("type") == "node" and "lat" in element and "lon" in element:
        return (float(element["lat"]), float(element["lon"]))
    center = element.get("center")
    if element.get("type") in ("way", "relation") and center:
        return (float(center["lat"]), float(center["lon"]))
    return None


class ProximityAnalyzer:
    """Builds a ProximityRecord for a listing polygon from Overpass data."""

    def __init__(
        self,
        client: Optional[OverpassClient] = None,
        cache: Optional[AmenityCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or get_overpass_client()
        self.cache = cache

    def analyze(self, listing_id: str, geojson: Dict[str, Any]) -> ProximityRecord:
        """
        Compute the proximity record of a listing.

        Args:
            listing_id: Listing the record is keyed by
            geojson: GeoJSON Polygon of the listing

        Returns:
            ProximityRecord (not persisted)

        Raises:
            ValueError: If listing_id or geojson is missing or malformed
            AmenitySourceError: If the amenity source could not be queried
            ProximityAnalysisError: If the returned data could not be processed
        """
        if not listing_id or not geojson:
            raise ValueError("Missing required parameters: listing_id and geojson")
        try:
            ring = geojson["coordinates"][0]
            center_lat, center_lng = bbox_center(ring)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid polygon coordinates: {str(e)}") from e

        logger.info(f"Calculating proximity analysis for listing {listing_id} "
                    f"(center: {center_lat:.6f}, {center_lng:.6f})")

        data = self._fetch_amenities(center_lat, center_lng)

        try:
            categories = self.classify_elements(data.get("elements", []), center_lat, center_lng)
        except (KeyError, TypeError, ValueError) as e:
            raise ProximityAnalysisError(f"Failed to process amenity data: {str(e)}") from e

        logger.info(
            "Processed amenities: "
            + ", ".join(f"{name}={len(items)}" for name, items in categories.items())
        )
        return self.build_record(listing_id, categories)

    def _fetch_amenities(self, lat: float, lng: float) -> Dict[str, Any]:
        radius = self.settings.proximity_search_radius_m
        transit_radius = self.settings.proximity_transit_radius_m

        if self.cache is not None:
            cached = self.cache.get(lat, lng, radius, transit_radius)
            if cached is not None:
                return cached

        query = self.client.build_amenity_query(
            lat,
            lng,
            radius_m=radius,
            transit_radius_m=transit_radius,
            road_tags=self.settings.proximity_road_tags,
        )
        data = self.client.fetch_json(query)

        if self.cache is not None:
            self.cache.set(data, lat, lng, radius, transit_radius)
        return data

    def classify_elements(
        self,
        elements: List[Dict[str, Any]],
        center_lat: float,
        center_lng: float,
    ) -> Dict[str, List[ProximityItem]]:
        """
        Put each element in exactly one category and sort categories by distance.

        A road highway tag wins over any other tag on the same element.
        Elements without a resolvable point are skipped.
        """
        road_tags = set(self.settings.proximity_road_tags)
        transit_radius = self.settings.proximity_transit_radius_m
        categories: Dict[str, List[ProximityItem]] = {name: [] for name in CATEGORIES}

        for element in elements:
            point = element_point(element)
            if point is None:
                continue

            distance = haversine_distance_m(center_lat, center_lng, point[0], point[1])
            tags = element.get("tags") or {}
            name = tags.get("name") or "Unnamed"
            amenity = tags.get("amenity")

            if tags.get("highway") in road_tags:
                categories[ROADS].append(ProximityItem(name, distance, tags["highway"]))
            elif amenity == "hospital":
                categories[HOSPITALS].append(ProximityItem(name, distance, tags.get("healthcare") or "hospital"))
            elif amenity in ("school", "university"):
                categories[SCHOOLS].append(ProximityItem(name, distance, amenity))
            elif amenity == "marketplace" or tags.get("shop") == "supermarket":
                categories[MARKETPLACES].append(ProximityItem(name, distance, tags.get("shop") or "marketplace"))
            elif tags.get("public_transport") and distance <= transit_radius:
                categories[PUBLIC_TRANSPORT].append(ProximityItem(name, distance, tags["public_transport"]))

        for items in categories.values():
            items.sort(key=lambda item: item.distance)
        return categories

    def build_record(self, listing_id: str, categories: Dict[str, List[ProximityItem]]) -> ProximityRecord:
        """Derive nearest fields and truncated lists from sorted categories."""
        limit = self.settings.proximity_max_results
        major_tags = set(self.settings.proximity_major_road_tags)

        roads = categories.get(ROADS, [])
        major_roads = [road for road in roads if road.type in major_tags]
        hospitals = categories.get(HOSPITALS, [])
        schools = categories.get(SCHOOLS, [])
        marketplaces = categories.get(MARKETPLACES, [])
        transit = categories.get(PUBLIC_TRANSPORT, [])

        def head(items: List[ProximityItem]) -> Optional[ProximityItem]:
            return items[0] if items else None

        def top(items: List[ProximityItem]) -> List[Dict[str, Any]]:
            return [asdict(item) for item in items[:limit]]

        nearest_road = head(roads)
        nearest_major = head(major_roads)
        nearest_hospital = head(hospitals)
        nearest_school = head(schools)
        nearest_market = head(marketplaces)

        return ProximityRecord(
            listing_id=listing_id,
            nearest_road_name=nearest_road.name if nearest_road else None,
            nearest_road_distance_m=nearest_road.distance if nearest_road else None,
            nearest_major_road_name=nearest_major.name if nearest_major else None,
            nearest_major_road_distance_m=nearest_major.distance if nearest_major else None,
            nearest_hospital_name=nearest_hospital.name if nearest_hospital else None,
            nearest_hospital_distance_m=nearest_hospital.distance if nearest_hospital else None,
            nearest_school_name=nearest_school.name if nearest_school else None,
            nearest_school_distance_m=nearest_school.distance if nearest_school else None,
            nearest_marketplace_name=nearest_market.name if nearest_market else None,
            nearest_marketplace_distance_m=nearest_market.distance if nearest_market else None,
            roads_within_5km=top(roads),
            hospitals_within_5km=top(hospitals),
            schools_within_5km=top(schools),
            marketplaces_within_5km=top(marketplaces),
            public_transport_nearby=top(transit),
        )
