"""Polygon validation, comparison and display helpers."""

from parcelgeo.services.geometry.validator import ValidationResult, PolygonMetrics, validate_polygon
from parcelgeo.services.geometry.comparator import (
    OverlapResult,
    SimilarityResult,
    check_polygon_overlap,
    polygon_similarity,
    calculate_polygon_similarity,
    scan_overlaps,
)

__all__ = [
    "ValidationResult",
    "PolygonMetrics",
    "validate_polygon",
    "OverlapResult",
    "SimilarityResult",
    "check_polygon_overlap",
    "polygon_similarity",
    "calculate_polygon_similarity",
    "scan_overlaps",
]
