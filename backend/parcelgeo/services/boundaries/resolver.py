"""Administrative boundary resolution for listing polygons."""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from parcelgeo.core.config import get_settings
from parcelgeo.services.boundaries.catalog import (
    AdminUnitRecord,
    BoundaryCatalog,
    LEVELS,
)
from parcelgeo.services.geometry.kernel import centroid, geodesic_area, load_geometry

logger = logging.getLogger(__name__)

FIRST_MATCH = "first_match"
SMALLEST_AREA = "smallest_area"


@dataclass
class AdminBoundaryMatch:
    region_id: Optional[str] = None
    district_id: Optional[str] = None
    ward_id: Optional[str] = None
    street_village_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    @property
    def matched_levels(self) -> List[str]:
        return [level for level in LEVELS if getattr(self, f"{level}_id") is not None]


class BoundaryResolver:
    """
    Walk region -> district -> ward -> street/village and record the unit
    containing a polygon at each level.

    A unit matches when it covers the polygon's centroid or intersects the
    polygon. Each level is only searched among the children of the unit
    matched one level up; the cascade stops at the first level without a
    match. Under ``first_match`` the first matching unit in catalog order
    wins, under ``smallest_area`` the smallest matching unit does.
    """

    def __init__(self, catalog: BoundaryCatalog, match_policy: Optional[str] = None):
        self.catalog = catalog
        self.match_policy = match_policy or get_settings().boundary_match_policy
        if self.match_policy not in (FIRST_MATCH, SMALLEST_AREA):
            raise ValueError(f"Unknown boundary match policy: {self.match_policy}")

    def resolve(self, polygon: Any) -> AdminBoundaryMatch:
        """
        Resolve the administrative units of a polygon.

        Args:
            polygon: GeoJSON geometry, Feature, or JSON string of either

        Returns:
            AdminBoundaryMatch; levels below the last match are None

        Raises:
            ValueError: If the input polygon geometry is invalid
        """
        geometry = load_geometry(polygon)
        center = centroid(geometry)

        result = AdminBoundaryMatch()
        parent_id: Optional[str] = None

        for level in LEVELS:
            unit = self._match_level(level, parent_id, geometry, center)
            if unit is None:
                break
            setattr(result, f"{level}_id", unit.id)
            logger.info(f"Matched {level}: {unit.name}")
            parent_id = unit.id

        logger.info(f"Boundary detection complete: {result.to_dict()}")
        return result

    def _match_level(
        self,
        level: str,
        parent_id: Optional[str],
        geometry: BaseGeometry,
        center: Point,
    ) -> Optional[AdminUnitRecord]:
        try:
            candidates = self.catalog.fetch_units(level, parent_id)
        except Exception as e:
            logger.error(f"Error fetching {level} candidates: {str(e)}")
            return None

        matches: List[Tuple[float, AdminUnitRecord]] = []
        for unit in candidates:
            if not unit.geometry:
                continue
            try:
                unit_geometry = load_geometry(unit.geometry)
                hit = unit_geometry.covers(center) or geometry.intersects(unit_geometry)
                if not hit:
                    continue
                if self.match_policy == FIRST_MATCH:
                    return unit
                matches.append((geodesic_area(unit_geometry), unit))
            except Exception as e:
                logger.warning(f"Error processing {level} {unit.name}: {str(e)}")

        if not matches:
            return None
        return min(matches, key=lambda m: m[0])[1]
