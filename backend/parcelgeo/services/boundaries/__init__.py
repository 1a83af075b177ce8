"""Administrative boundary catalog access and resolution."""

from parcelgeo.services.boundaries.catalog import AdminUnitRecord, BoundaryCatalog, SqlBoundaryCatalog
from parcelgeo.services.boundaries.resolver import AdminBoundaryMatch, BoundaryResolver

__all__ = [
    "AdminUnitRecord",
    "BoundaryCatalog",
    "SqlBoundaryCatalog",
    "AdminBoundaryMatch",
    "BoundaryResolver",
]
