"""Nearest-amenity enrichment of listings."""

from parcelgeo.services.proximity.analyzer import (
    ProximityAnalysisError,
    ProximityAnalyzer,
    ProximityItem,
    ProximityRecord,
)
from parcelgeo.services.proximity.store import ProximityStore

__all__ = [
    "ProximityAnalysisError",
    "ProximityAnalyzer",
    "ProximityItem",
    "ProximityRecord",
    "ProximityStore",
]
