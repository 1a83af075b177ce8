"""Display helpers for listing polygons: simplification, labels and map bounds."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pyproj import Geod
from shapely.geometry import mapping

from parcelgeo.core.config import get_settings
from parcelgeo.services.geometry.kernel import (
    build_polygon,
    geodesic_area,
    haversine_distance_m,
    polygon_from_geojson,
    polygon_perimeter,
)

logger = logging.getLogger(__name__)

_sphere = Geod(ellps="sphere")


def simplify_polygon(geojson: Any, tolerance: float = 0.00001) -> Any:
    """
    Simplify a polygon to reduce vertex count while preserving shape.

    Args:
        geojson: GeoJSON Polygon geometry
        tolerance: Simplification tolerance in degrees

    Returns:
        Simplified GeoJSON geometry, or the input unchanged if it cannot be simplified
    """
    try:
        polygon = polygon_from_geojson(geojson)
        simplified = polygon.simplify(tolerance, preserve_topology=True)
        if simplified.is_empty:
            return geojson
        result = mapping(simplified)
        return {
            "type": result["type"],
            "coordinates": [[list(p) for p in ring] for ring in result["coordinates"]],
        }
    except Exception as e:
        logger.error(f"Error simplifying polygon: {str(e)}")
        return geojson


def format_area(area_m2: float) -> str:
    """Format an area in m² for display (m², ha or km²)."""
    if area_m2 < 10_000:
        return f"{area_m2:.2f} m²"
    elif area_m2 < 1_000_000:
        return f"{area_m2 / 10_000:.2f} ha"
    return f"{area_m2 / 1_000_000:.2f} km²"


def format_dimension(meters: float) -> str:
    """Format an edge length for display (cm, m or km)."""
    if meters < 1:
        return f"{meters * 100:.1f}cm"
    elif meters < 1000:
        return f"{meters:.1f}m"
    return f"{meters / 1000:.2f}km"


def get_polygon_bounds(geojson: Any) -> Dict[str, Any]:
    """
    Map center and zoom level for displaying a polygon.

    Returns:
        Dictionary with ``center`` as (lng, lat) and integer ``zoom``
    """
    try:
        polygon = polygon_from_geojson(geojson)
        min_lng, min_lat, max_lng, max_lat = polygon.bounds
        center = ((min_lng + max_lng) / 2, (min_lat + max_lat) / 2)

        area_m2 = geodesic_area(polygon)
        zoom = 15
        if area_m2 > 10_000_000:  # > 1000 ha
            zoom = 10
        elif area_m2 > 1_000_000:  # > 100 ha
            zoom = 12
        elif area_m2 > 100_000:  # > 10 ha
            zoom = 14

        return {"center": center, "zoom": zoom}
    except Exception as e:
        logger.error(f"Error getting polygon bounds: {str(e)}")
        return {"center": tuple(get_settings().default_map_center), "zoom": 10}


def _outer_ring(geojson: Any) -> Optional[List[List[float]]]:
    if not isinstance(geojson, dict):
        return None
    geo_type = geojson.get("type")
    if geo_type == "Feature":
        return _outer_ring(geojson.get("geometry"))
    if geo_type == "FeatureCollection":
        features = geojson.get("features") or []
        return _outer_ring(features[0]) if features else None
    if geo_type == "Polygon":
        return geojson["coordinates"][0]
    return None


def _label_angle(start: Tuple[float, float], end: Tuple[float, float]) -> float:
    # Bearing from north, clockwise, in -180..180; flipped so labels are never upside down
    bearing, _, _ = _sphere.inv(start[0], start[1], end[0], end[1])
    if bearing > 90 or bearing < -90:
        bearing += 180
    return bearing


def calculate_polygon_dimensions(geojson: Any) -> List[Dict[str, Any]]:
    """
    Length, midpoint and label angle for each edge of a polygon's outer ring.

    Accepts a Polygon geometry, a Feature, or a FeatureCollection (first feature).
    Returns an empty list when the input cannot be read.
    """
    try:
        coordinates = _outer_ring(geojson)
        if not coordinates:
            return []

        edges = []
        for i in range(len(coordinates) - 1):
            start = (float(coordinates[i][0]), float(coordinates[i][1]))
            end = (float(coordinates[i + 1][0]), float(coordinates[i + 1][1]))

            length = haversine_distance_m(start[1], start[0], end[1], end[0])
            if start == end:
                midpoint = start
            else:
                midpoint = tuple(_sphere.npts(start[0], start[1], end[0], end[1], 1)[0])

            edges.append({
                "start_coord": start,
                "end_coord": end,
                "midpoint": midpoint,
                "length_m": length,
                "angle": _label_angle(start, end),
                "formatted_length": format_dimension(length),
            })

        return edges
    except Exception as e:
        logger.error(f"Error calculating polygon dimensions: {str(e)}")
        return []


def calculate_perimeter(geojson: Any) -> float:
    """Perimeter of a polygon in meters; 0 when it cannot be computed."""
    try:
        ring = _outer_ring(geojson)
        if not ring:
            return 0.0
        if isinstance(geojson, dict) and geojson.get("type") == "Polygon":
            polygon = build_polygon(geojson["coordinates"])
        else:
            polygon = build_polygon([ring])
        return polygon_perimeter(polygon)
    except Exception as e:
        logger.error(f"Error calculating perimeter: {str(e)}")
        return 0.0
