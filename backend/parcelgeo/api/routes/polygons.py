"""Polygon validation and comparison API endpoints."""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from parcelgeo.db.session import get_db
from parcelgeo.schemas.polygon import (
    ValidationResponse,
    PolygonPairRequest,
    OverlapResponse,
    SimilarityResponse,
    OverlapCheckRequest,
    OverlapCheckResponse,
    SimplifyRequest,
    DimensionsResponse,
)
from parcelgeo.services.geometry import (
    validate_polygon,
    check_polygon_overlap,
    polygon_similarity,
    scan_overlaps,
)
from parcelgeo.services.geometry.dimensions import (
    simplify_polygon,
    calculate_polygon_dimensions,
    calculate_perimeter,
    get_polygon_bounds,
    format_area,
)
from parcelgeo.services.geometry.kernel import geodesic_area, polygon_from_geojson
from parcelgeo.services.utils import fetch_overlap_candidates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/polygons", tags=["Polygons"])


@router.post("/validate", response_model=ValidationResponse)
def validate(geojson: Dict[str, Any] = Body(...)):
    """
    Validate a listing polygon.

    Errors mean the polygon cannot be used; warnings only ask the user to
    double check it.
    """
    return validate_polygon(geojson).to_dict()


@router.post("/overlap", response_model=OverlapResponse)
def overlap(request: PolygonPairRequest):
    """Overlap of polygon2 with polygon1; the percentage is relative to polygon1."""
    return check_polygon_overlap(request.polygon1, request.polygon2).to_dict()


@router.post("/similarity", response_model=SimilarityResponse)
def similarity(request: PolygonPairRequest):
    """Similarity score 0-100 of two polygons (area, centroid distance, overlap)."""
    return polygon_similarity(request.polygon1, request.polygon2).to_dict()


@router.post("/check-overlap", response_model=OverlapCheckResponse)
def check_overlap(
    request: OverlapCheckRequest,
    db: Session = Depends(get_db),
):
    """
    Check a new listing polygon against existing listings.

    Args:
        request: Polygon and optional listing id to exclude (when editing)
        db: Database session

    Returns:
        Whether the listing can proceed and the largest overlaps found
    """
    try:
        candidates = fetch_overlap_candidates(db, request.geojson, request.exclude_listing_id)
        return scan_overlaps(request.geojson, candidates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error checking polygon overlaps: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to check overlaps: {str(e)}")


@router.post("/simplify")
def simplify(request: SimplifyRequest):
    """Simplified copy of the polygon; the input is returned unchanged if it cannot be simplified."""
    return simplify_polygon(request.geojson, request.tolerance)


@router.post("/dimensions", response_model=DimensionsResponse)
def dimensions(geojson: Dict[str, Any] = Body(...)):
    """Edge lengths, perimeter, area label and map framing for drawing a polygon."""
    try:
        area_label = format_area(geodesic_area(polygon_from_geojson(geojson)))
    except ValueError:
        area_label = None

    bounds = get_polygon_bounds(geojson)
    return {
        "edges": calculate_polygon_dimensions(geojson),
        "perimeter_m": calculate_perimeter(geojson),
        "area_label": area_label,
        "center": bounds["center"],
        "zoom": bounds["zoom"],
    }
