from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict, Tuple


class PolygonMetricsRead(BaseModel):
    area_m2: float
    perimeter_m: float
    centroid: Tuple[float, float]
    is_convex: bool
    num_vertices: int


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[str]
    warnings: List[str]
    metrics: Optional[PolygonMetricsRead] = None


class PolygonPairRequest(BaseModel):
    polygon1: Dict[str, Any]
    polygon2: Dict[str, Any]


class OverlapResponse(BaseModel):
    overlaps: bool
    overlap_area_m2: Optional[float] = None
    overlap_percentage: Optional[float] = None  # relative to polygon1
    error: Optional[str] = None


class SimilarityResponse(BaseModel):
    score: int = Field(..., ge=0, le=100)
    area_similarity: float
    distance_similarity: float
    overlap_similarity: float
    error: Optional[str] = None


class OverlapCheckRequest(BaseModel):
    geojson: Dict[str, Any]
    exclude_listing_id: Optional[str] = None  # listing being edited


class OverlappingProperty(BaseModel):
    listing_id: str
    listing_title: str
    overlap_percentage: float
    overlap_area_m2: float


class OverlapCheckResponse(BaseModel):
    can_proceed: bool
    has_overlaps: bool
    max_overlap_percentage: float
    overlapping_properties: List[OverlappingProperty]
    message: str


class SimplifyRequest(BaseModel):
    geojson: Dict[str, Any]
    tolerance: float = Field(default=0.00001, gt=0)


class EdgeDimension(BaseModel):
    start_coord: Tuple[float, float]
    end_coord: Tuple[float, float]
    midpoint: Tuple[float, float]
    length_m: float
    angle: float
    formatted_length: str


class DimensionsResponse(BaseModel):
    edges: List[EdgeDimension]
    perimeter_m: float
    area_label: Optional[str] = None
    center: Tuple[float, float]
    zoom: int
