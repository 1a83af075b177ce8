"""Read access to the administrative boundary catalog."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from parcelgeo.models.administrative_unit import Region, District, Ward, StreetVillage

logger = logging.getLogger(__name__)

REGION = "region"
DISTRICT = "district"
WARD = "ward"
STREET_VILLAGE = "street_village"

# Resolution order, outermost first
LEVELS = (REGION, DISTRICT, WARD, STREET_VILLAGE)


@dataclass
class AdminUnitRecord:
    id: str
    name: str
    geometry: Any  # GeoJSON dict or JSON-encoded string


class BoundaryCatalog(ABC):
    """Source of administrative units, queried one level at a time."""

    @abstractmethod
    def fetch_units(self, level: str, parent_id: Optional[str] = None) -> List[AdminUnitRecord]:
        """
        Fetch candidate units at a level.

        Args:
            level: One of LEVELS
            parent_id: Id of the matched unit one level up (None for regions)

        Returns:
            Units in catalog order
        """


class SqlBoundaryCatalog(BoundaryCatalog):
    """Boundary catalog backed by the regions/districts/wards/streets_villages tables."""

    _models = {
        REGION: (Region, None),
        DISTRICT: (District, "region_id"),
        WARD: (Ward, "district_id"),
        STREET_VILLAGE: (StreetVillage, "ward_id"),
    }

    def __init__(self, db: Session):
        self.db = db

    def fetch_units(self, level: str, parent_id: Optional[str] = None) -> List[AdminUnitRecord]:
        if level not in self._models:
            raise ValueError(f"Unknown administrative level: {level}")

        model, parent_column = self._models[level]
        query = self.db.query(model.id, model.name, model.geometry)
        if parent_column is not None:
            query = query.filter(getattr(model, parent_column) == parent_id)

        rows = query.order_by(model.name, model.id).all()
        logger.debug(f"Fetched {len(rows)} {level} candidates (parent_id={parent_id})")

        return [AdminUnitRecord(id=row.id, name=row.name, geometry=row.geometry) for row in rows]
