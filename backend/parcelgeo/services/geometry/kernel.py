"""Geometry helpers shared by the validator, comparator, resolver and proximity analyzer.

Coordinates are GeoJSON order (lng, lat) everywhere in this module unless a
function says otherwise. Areas and lengths are geodesic on WGS84 (pyproj),
point-to-point distances are haversine on a spherical Earth.
"""

import json
import math
from typing import Any, Iterator, List, Sequence, Tuple

from pyproj import Geod
from shapely.geometry import Point, Polygon, shape
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

EARTH_RADIUS_M = 6371000.0

geod = Geod(ellps="WGS84")


def load_geometry(value: Any) -> BaseGeometry:
    """
    Normalize a stored geometry into a shapely geometry.

    Accepts a GeoJSON geometry dict, a GeoJSON Feature, or either of those
    encoded as a JSON string (boundary catalog rows come in both forms).

    Raises:
        ValueError: If the value is empty or not a GeoJSON geometry
    """
    if value is None:
        raise ValueError("Geometry is empty")
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Geometry is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError(f"Unsupported geometry value of type {type(value).__name__}")
    # Features, including bare {"geometry": ...} wrappers sent by clients
    if value.get("type") == "Feature" or ("type" not in value and "geometry" in value):
        return load_geometry(value.get("geometry"))

    try:
        geom = shape(value)
    except Exception as e:
        raise ValueError(f"Invalid GeoJSON geometry: {e}") from e
    if geom.is_empty:
        raise ValueError("Geometry is empty")
    return geom


def _position(value: Any) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise ValueError("Each position must be an array of at least 2 numbers")
    try:
        lng, lat = float(value[0]), float(value[1])
    except TypeError as e:
        raise ValueError(f"Position coordinates must be numbers: {e}") from e
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValueError("Position coordinates must be finite numbers")
    return (lng, lat)


def build_polygon(coordinates: Sequence[Sequence[Any]]) -> Polygon:
    """
    Build a shapely polygon from GeoJSON Polygon coordinates.

    Unlike ``shapely.geometry.Polygon`` this refuses open rings instead of
    closing them silently.

    Raises:
        ValueError: If a ring is too short, not closed, or has bad positions
    """
    if not isinstance(coordinates, (list, tuple)):
        raise ValueError("Polygon coordinates must be an array of linear rings")
    if not coordinates:
        raise ValueError("Polygon must have at least one linear ring")

    rings: List[List[Tuple[float, float]]] = []
    for ring in coordinates:
        if not isinstance(ring, (list, tuple)) or len(ring) < 4:
            raise ValueError("Each linear ring of a Polygon must have 4 or more positions")
        positions = [_position(p) for p in ring]
        if positions[0] != positions[-1]:
            raise ValueError("First and last position of a linear ring are not equivalent")
        rings.append(positions)

    return Polygon(rings[0], rings[1:])


def polygon_from_geojson(geojson: Any) -> Polygon:
    """Build a polygon from a GeoJSON Polygon geometry or Feature wrapping one."""
    if isinstance(geojson, dict) and geojson.get("type") == "Feature":
        geojson = geojson.get("geometry")
    if not isinstance(geojson, dict) or geojson.get("type") != "Polygon":
        raise ValueError("Geometry must be a GeoJSON Polygon")
    return build_polygon(geojson.get("coordinates"))


def iter_polygons(geom: BaseGeometry) -> Iterator[Polygon]:
    """Yield the polygonal parts of any geometry, recursing into collections."""
    if geom is None or geom.is_empty:
        return
    if isinstance(geom, Polygon):
        yield geom
    elif hasattr(geom, "geoms"):
        for part in geom.geoms:
            yield from iter_polygons(part)


def geodesic_area(geom: BaseGeometry) -> float:
    """Geodesic area in m² of the polygonal parts of a geometry."""
    total = 0.0
    for polygon in iter_polygons(geom):
        area, _ = geod.geometry_area_perimeter(orient(polygon, sign=1.0))
        total += abs(area)
    return total


def geodesic_length(geom: BaseGeometry) -> float:
    """Geodesic length in meters of a linear geometry."""
    return float(geod.geometry_length(geom))


def polygon_perimeter(polygon: Polygon) -> float:
    """Length of the polygon boundary (all rings) in meters."""
    return geodesic_length(polygon.boundary)


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def point_distance_m(p1: Point, p2: Point) -> float:
    """Haversine distance between two shapely points in (lng, lat) order."""
    return haversine_distance_m(p1.y, p1.x, p2.y, p2.x)


def centroid(geom: BaseGeometry) -> Point:
    """
    Geometric centroid of a geometry.

    Zero-area shapes (slivers, bowties whose lobes cancel) have an empty
    area centroid, so the centroid of their boundary is used instead.
    """
    point = geom.centroid
    if point.is_empty:
        point = geom.boundary.centroid
    return point


def has_self_intersections(polygon: Polygon) -> bool:
    """True when any ring of the polygon crosses or touches itself."""
    rings = [polygon.exterior, *polygon.interiors]
    return any(not ring.is_simple for ring in rings)


def bbox_center(coordinates: Sequence[Sequence[float]]) -> Tuple[float, float]:
    """
    Midpoint of the min/max longitude and latitude of a ring.

    Returns:
        Tuple of (lat, lng)
    """
    lngs = [float(c[0]) for c in coordinates]
    lats = [float(c[1]) for c in coordinates]
    center_lat = (max(lats) + min(lats)) / 2
    center_lng = (max(lngs) + min(lngs)) / 2
    return (center_lat, center_lng)
