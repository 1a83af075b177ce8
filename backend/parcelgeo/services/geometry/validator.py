"""Validation of land-parcel polygons submitted with a listing."""

import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

from parcelgeo.core.config import Settings, get_settings
from parcelgeo.services.geometry.kernel import (
    build_polygon,
    centroid,
    geodesic_area,
    has_self_intersections,
    haversine_distance_m,
    polygon_perimeter,
)

logger = logging.getLogger(__name__)


@dataclass
class PolygonMetrics:
    area_m2: float
    perimeter_m: float
    centroid: Tuple[float, float]  # (lng, lat)
    is_convex: bool
    num_vertices: int


@dataclass
class ValidationResult:
    """Outcome of a polygon validation. Errors block the listing, warnings do not."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Optional[PolygonMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _aspect_ratio(bounds: Tuple[float, float, float, float]) -> float:
    min_lng, min_lat, max_lng, max_lat = bounds
    width = haversine_distance_m(min_lat, min_lng, min_lat, max_lng)
    height = haversine_distance_m(min_lat, min_lng, max_lat, min_lng)
    shorter = min(width, height)
    if shorter == 0:
        return math.inf
    return max(width, height) / shorter


def validate_polygon(geojson: Any, settings: Optional[Settings] = None) -> ValidationResult:
    """
    Validate a GeoJSON polygon for listing creation.

    Checks accumulate; only structural problems return early. Never raises:
    unexpected failures become a "Validation error" entry.

    Args:
        geojson: GeoJSON Polygon geometry ({"type": "Polygon", "coordinates": [...]})
        settings: Optional settings override (thresholds, country bounds)

    Returns:
        ValidationResult with metrics when the polygon could be measured
    """
    settings = settings or get_settings()
    errors: List[str] = []
    warnings: List[str] = []

    try:
        # Structure
        if not geojson or not isinstance(geojson, dict):
            errors.append("Invalid GeoJSON format")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        if geojson.get("type") != "Polygon":
            errors.append('GeoJSON must be of type "Polygon"')
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        coordinates = geojson.get("coordinates")
        if not coordinates or not isinstance(coordinates, list):
            errors.append("Missing or invalid coordinates array")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        outer_ring = coordinates[0]
        if not isinstance(outer_ring, list) or len(outer_ring) < 4:
            errors.append("Polygon must have at least 3 vertices")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        polygon = build_polygon(coordinates)

        if has_self_intersections(polygon):
            errors.append("Polygon has self-intersections (invalid geometry)")

        area_m2 = geodesic_area(polygon)
        if area_m2 < settings.min_polygon_area_m2:
            errors.append(f"Polygon area is too small (minimum {settings.min_polygon_area_m2:g} m²)")
        if area_m2 > settings.max_polygon_area_m2:
            warnings.append(
                f"Polygon area is very large (> {settings.max_polygon_area_m2 / 1_000_000:g} km²). Please verify."
            )

        perimeter_m = polygon_perimeter(polygon)

        if _aspect_ratio(polygon.bounds) > settings.max_aspect_ratio:
            warnings.append("Polygon has unusual elongation. Please verify boundaries.")

        num_vertices = len(outer_ring) - 1
        if num_vertices < 3:
            errors.append("Polygon must have at least 3 vertices")
        if num_vertices > settings.max_polygon_vertices:
            warnings.append(
                f"Polygon has many vertices (> {settings.max_polygon_vertices}). Consider simplification."
            )

        center = centroid(polygon)
        centroid_coords = (center.x, center.y)

        min_lng, min_lat, max_lng, max_lat = settings.country_bounds
        lng, lat = centroid_coords
        if lng < min_lng or lng > max_lng or lat < min_lat or lat > max_lat:
            warnings.append(f"Polygon centroid is outside {settings.country_name} boundaries")

        hull_area = geodesic_area(polygon.convex_hull)
        is_convex = abs(hull_area - area_m2) < settings.convexity_tolerance * area_m2

        metrics = PolygonMetrics(
            area_m2=area_m2,
            perimeter_m=perimeter_m,
            centroid=centroid_coords,
            is_convex=is_convex,
            num_vertices=num_vertices,
        )

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            metrics=metrics,
        )

    except Exception as e:
        logger.warning(f"Polygon validation failed: {str(e)}")
        errors.append(f"Validation error: {str(e)}")
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)
