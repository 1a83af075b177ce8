from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Any, Dict


class ProximityRequest(BaseModel):
    listing_id: str = Field(..., min_length=1)
    geojson: Dict[str, Any]


class ProximityItemRead(BaseModel):
    name: str
    distance: float
    type: Optional[str] = None


class ProximityAnalysisRead(BaseModel):
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
    roads_within_5km: List[ProximityItemRead] = []
    hospitals_within_5km: List[ProximityItemRead] = []
    schools_within_5km: List[ProximityItemRead] = []
    marketplaces_within_5km: List[ProximityItemRead] = []
    public_transport_nearby: List[ProximityItemRead] = []
    calculated_at: datetime

    class Config:
        from_attributes = True


class ProximityResponse(BaseModel):
    success: bool
    analysis: ProximityAnalysisRead
