from pydantic import BaseModel
from typing import Optional, Any, Dict


class BoundaryDetectRequest(BaseModel):
    # Feature-like {"geometry": {...}} or a bare GeoJSON geometry
    polygon: Dict[str, Any]


class AdminBoundaries(BaseModel):
    region_id: Optional[str] = None
    district_id: Optional[str] = None
    ward_id: Optional[str] = None
    street_village_id: Optional[str] = None


class BoundaryDetectResponse(BaseModel):
    success: bool
    boundaries: AdminBoundaries
