"""Administrative boundary detection API endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from parcelgeo.db.session import get_db
from parcelgeo.schemas.boundary import BoundaryDetectRequest, BoundaryDetectResponse
from parcelgeo.services.boundaries import BoundaryCatalog, BoundaryResolver, SqlBoundaryCatalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boundaries", tags=["Boundaries"])


def get_boundary_catalog(db: Session = Depends(get_db)) -> BoundaryCatalog:
    return SqlBoundaryCatalog(db)


@router.post("/detect", response_model=BoundaryDetectResponse)
def detect_boundaries(
    request: BoundaryDetectRequest,
    catalog: BoundaryCatalog = Depends(get_boundary_catalog),
):
    """
    Detect region, district, ward and street/village of a listing polygon.

    Levels are matched top-down; a level without a match leaves it and
    every level below it empty.
    """
    try:
        match = BoundaryResolver(catalog).resolve(request.polygon)
        return {"success": True, "boundaries": match.to_dict()}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid polygon: {str(e)}")
    except Exception as e:
        logger.error(f"Boundary detection failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to detect boundaries: {str(e)}")
