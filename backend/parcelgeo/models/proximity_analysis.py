"""Proximity analysis model (one row per listing)."""

from sqlalchemy import Column, String, Float, DateTime, JSON
from datetime import datetime, timezone
import uuid

from parcelgeo.db.base import Base


class ProximityAnalysis(Base):
    """Nearest amenities around a listing polygon, overwritten on recomputation."""

    __tablename__ = "proximity_analysis"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    listing_id = Column(String(36), nullable=False, unique=True, index=True)

    nearest_road_name = Column(String(255), nullable=True)
    nearest_road_distance_m = Column(Float, nullable=True)
    nearest_major_road_name = Column(String(255), nullable=True)
    nearest_major_road_distance_m = Column(Float, nullable=True)
    nearest_hospital_name = Column(String(255), nullable=True)
    nearest_hospital_distance_m = Column(Float, nullable=True)
    nearest_school_name = Column(String(255), nullable=True)
    nearest_school_distance_m = Column(Float, nullable=True)
    nearest_marketplace_name = Column(String(255), nullable=True)
    nearest_marketplace_distance_m = Column(Float, nullable=True)

    roads_within_5km = Column(JSON, nullable=False, default=list)
    hospitals_within_5km = Column(JSON, nullable=False, default=list)
    schools_within_5km = Column(JSON, nullable=False, default=list)
    marketplaces_within_5km = Column(JSON, nullable=False, default=list)
    public_transport_nearby = Column(JSON, nullable=False, default=list)

    calculated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
