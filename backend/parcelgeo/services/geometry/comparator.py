"""Pairwise polygon comparison for duplicate-listing detection."""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

from parcelgeo.core.config import Settings, get_settings
from parcelgeo.services.geometry.kernel import (
    centroid,
    geodesic_area,
    point_distance_m,
    polygon_from_geojson,
)

logger = logging.getLogger(__name__)


@dataclass
class OverlapResult:
    """
    Overlap between two polygons.

    ``overlap_percentage`` is relative to the FIRST polygon's area, so
    overlap(P, Q) and overlap(Q, P) agree on ``overlaps`` but generally not
    on the percentage.
    """

    overlaps: bool
    overlap_area_m2: Optional[float] = None
    overlap_percentage: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SimilarityResult:
    score: int
    area_similarity: float = 0.0
    distance_similarity: float = 0.0
    overlap_similarity: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def check_polygon_overlap(polygon1: Any, polygon2: Any) -> OverlapResult:
    """
    Check if two GeoJSON polygons overlap.

    Returns:
        OverlapResult; on any geometry failure ``overlaps`` is False and
        ``error`` carries the reason
    """
    try:
        poly1 = polygon_from_geojson(polygon1)
        poly2 = polygon_from_geojson(polygon2)

        intersection = poly1.intersection(poly2)
        overlap_area = geodesic_area(intersection)
        if intersection.is_empty or overlap_area <= 0:
            return OverlapResult(overlaps=False)

        area1 = geodesic_area(poly1)
        overlap_percentage = (overlap_area / area1) * 100

        return OverlapResult(
            overlaps=True,
            overlap_area_m2=overlap_area,
            overlap_percentage=overlap_percentage,
        )
    except Exception as e:
        logger.error(f"Error checking polygon overlap: {str(e)}")
        return OverlapResult(overlaps=False, error=str(e))


def polygon_similarity(
    polygon1: Any,
    polygon2: Any,
    settings: Optional[Settings] = None,
) -> SimilarityResult:
    """
    Score how likely two polygons describe the same parcel (0-100).

    Combines area similarity, centroid proximity scaled to parcel size, and
    the overlap percentage of polygon1.
    """
    settings = settings or get_settings()
    try:
        poly1 = polygon_from_geojson(polygon1)
        poly2 = polygon_from_geojson(polygon2)

        area1 = geodesic_area(poly1)
        area2 = geodesic_area(poly2)
        larger = max(area1, area2)
        area_similarity = 1 - abs(area1 - area2) / larger

        distance = point_distance_m(centroid(poly1), centroid(poly2))
        max_distance = math.sqrt(larger) * 2
        distance_similarity = max(0.0, 1 - distance / max_distance)

        overlap = check_polygon_overlap(polygon1, polygon2)
        if overlap.error:
            raise ValueError(overlap.error)
        overlap_similarity = overlap.overlap_percentage / 100 if overlap.overlap_percentage else 0.0

        similarity = (
            area_similarity * settings.similarity_area_weight
            + distance_similarity * settings.similarity_distance_weight
            + overlap_similarity * settings.similarity_overlap_weight
        ) * 100

        return SimilarityResult(
            score=int(round(similarity)),
            area_similarity=area_similarity,
            distance_similarity=distance_similarity,
            overlap_similarity=overlap_similarity,
        )
    except Exception as e:
        logger.error(f"Error calculating polygon similarity: {str(e)}")
        return SimilarityResult(score=0, error=str(e))


def calculate_polygon_similarity(polygon1: Any, polygon2: Any) -> int:
    """Similarity score only; 0 when the polygons cannot be compared."""
    return polygon_similarity(polygon1, polygon2).score


def scan_overlaps(
    geojson: Any,
    candidates: Iterable[Dict[str, Any]],
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    Compare a new listing polygon against existing listing polygons.

    Args:
        geojson: GeoJSON Polygon of the listing being created or edited
        candidates: Dicts with ``listing_id``, ``listing_title`` and ``geojson``
        settings: Optional settings override (thresholds)

    Returns:
        Dictionary with can_proceed, has_overlaps, max_overlap_percentage,
        overlapping_properties and a message

    Raises:
        ValueError: If the new polygon is not a valid GeoJSON Polygon
    """
    settings = settings or get_settings()
    new_polygon = polygon_from_geojson(geojson)
    new_bounds = new_polygon.bounds

    overlaps: List[Dict[str, Any]] = []
    max_overlap = 0.0
    has_blocking_overlap = False

    for candidate in candidates:
        listing_id = candidate.get("listing_id")
        try:
            existing = polygon_from_geojson(candidate.get("geojson"))

            e_min_lng, e_min_lat, e_max_lng, e_max_lat = existing.bounds
            n_min_lng, n_min_lat, n_max_lng, n_max_lat = new_bounds
            if (n_max_lng < e_min_lng or n_min_lng > e_max_lng
                    or n_max_lat < e_min_lat or n_min_lat > e_max_lat):
                continue

            result = check_polygon_overlap(geojson, candidate.get("geojson"))
            if result.error:
                raise ValueError(result.error)
            if not result.overlaps:
                continue

            percentage = result.overlap_percentage
            logger.debug(f"Overlap with {listing_id}: {percentage:.2f}% ({result.overlap_area_m2:.2f} m²)")

            if percentage > settings.overlap_report_threshold_pct:
                overlaps.append({
                    "listing_id": listing_id,
                    "listing_title": candidate.get("listing_title") or "Unknown Property",
                    "overlap_percentage": round(percentage, 1),
                    "overlap_area_m2": round(result.overlap_area_m2),
                })
                max_overlap = max(max_overlap, percentage)
                if percentage > settings.overlap_block_threshold_pct:
                    has_blocking_overlap = True

        except Exception as e:
            logger.warning(f"Skipping candidate polygon of listing {listing_id}: {str(e)}")

    overlaps.sort(key=lambda o: o["overlap_percentage"], reverse=True)

    if has_blocking_overlap:
        message = (
            f"This property overlaps {max_overlap:.1f}% with an existing listing. "
            f"Properties cannot overlap more than {settings.overlap_block_threshold_pct:g}%."
        )
    elif overlaps:
        message = f"Warning: Minor overlap detected ({max_overlap:.1f}%) with existing properties."
    else:
        message = "No overlaps detected."

    return {
        "can_proceed": not has_blocking_overlap,
        "has_overlaps": len(overlaps) > 0,
        "max_overlap_percentage": round(max_overlap, 1),
        "overlapping_properties": overlaps[: settings.overlap_max_reported],
        "message": message,
    }
