"""Listing proximity analysis API endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from parcelgeo.db.session import get_db
from parcelgeo.core.config import get_settings
from parcelgeo.schemas.proximity import ProximityRequest, ProximityResponse
from parcelgeo.services.osm import AmenitySourceError, AmenitySourceTimeout, get_amenity_cache, get_overpass_client
from parcelgeo.services.proximity import ProximityAnalysisError, ProximityAnalyzer, ProximityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proximity", tags=["Proximity"])


def get_proximity_analyzer() -> ProximityAnalyzer:
    settings = get_settings()
    cache = get_amenity_cache() if settings.amenity_cache_enabled else None
    return ProximityAnalyzer(client=get_overpass_client(), cache=cache, settings=settings)


def get_proximity_store(db: Session = Depends(get_db)) -> ProximityStore:
    return ProximityStore(db)


@router.post("", response_model=ProximityResponse)
def analyze_proximity(
    request: ProximityRequest,
    analyzer: ProximityAnalyzer = Depends(get_proximity_analyzer),
    store: ProximityStore = Depends(get_proximity_store),
):
    """
    Compute and store nearest roads, hospitals, schools, marketplaces and
    public transport for a listing.

    Nothing is stored when the amenity source fails.
    """
    try:
        record = analyzer.analyze(request.listing_id, request.geojson)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AmenitySourceTimeout as e:
        logger.warning(f"Amenity source timed out for listing {request.listing_id}: {str(e)}")
        raise HTTPException(status_code=504, detail="Amenity data source timed out. Please try again later.")
    except (AmenitySourceError, ProximityAnalysisError) as e:
        logger.error(f"Proximity analysis failed for listing {request.listing_id}: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch amenity data: {str(e)}")

    try:
        analysis = store.upsert(record)
    except Exception as e:
        logger.error(f"Failed to save proximity analysis: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to save proximity analysis: {str(e)}")

    return {"success": True, "analysis": analysis}
