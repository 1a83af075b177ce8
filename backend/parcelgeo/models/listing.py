from sqlalchemy import Column, String, ForeignKey, JSON, TIMESTAMP
from geoalchemy2 import Geography
from sqlalchemy.sql import func
import uuid

from parcelgeo.db.base import Base


class Listing(Base):
    """Listing fields this service reads and the administrative location it fills in."""

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False, default="draft", index=True)
    region_id = Column(String(36), ForeignKey("regions.id"), nullable=True)
    district_id = Column(String(36), ForeignKey("districts.id"), nullable=True)
    ward_id = Column(String(36), ForeignKey("wards.id"), nullable=True)
    street_village_id = Column(String(36), ForeignKey("streets_villages.id"), nullable=True)
    created_at = Column(TIMESTAMP(timezone=False), server_default=func.now(), nullable=False)


class ListingPolygon(Base):
    __tablename__ = "listing_polygons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    listing_id = Column(String(36), ForeignKey("listings.id"), nullable=False, index=True)
    geojson = Column(JSON, nullable=False)
    geom = Column(Geography(geometry_type="POLYGON", srid=4326), nullable=True)
