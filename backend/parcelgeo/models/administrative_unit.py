"""Administrative hierarchy models (region -> district -> ward -> street/village)."""

from sqlalchemy import Column, String, ForeignKey, JSON
import uuid

from parcelgeo.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Region(Base):
    __tablename__ = "regions"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    # GeoJSON geometry; legacy rows hold it as a JSON-encoded string
    geometry = Column(JSON, nullable=True)


class District(Base):
    __tablename__ = "districts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    geometry = Column(JSON, nullable=True)
    region_id = Column(String(36), ForeignKey("regions.id"), nullable=False, index=True)


class Ward(Base):
    __tablename__ = "wards"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    geometry = Column(JSON, nullable=True)
    district_id = Column(String(36), ForeignKey("districts.id"), nullable=False, index=True)


class StreetVillage(Base):
    __tablename__ = "streets_villages"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    geometry = Column(JSON, nullable=True)
    ward_id = Column(String(36), ForeignKey("wards.id"), nullable=False, index=True)
