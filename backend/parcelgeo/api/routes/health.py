from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import text
from parcelgeo.db.session import get_db
from parcelgeo.services.osm.overpass_client import get_overpass_client

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "",
    summary="System Health Check",
    description="Checks system status including the database connection and, optionally, the Overpass API",
    response_description="System, database and amenity source status"
)
def health_check(
    check_overpass: bool = Query(False, description="Also check that the Overpass API responds"),
    db: Session = Depends(get_db),
):
    """
    System health check endpoint.

    Tests the database connection and returns the system status.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "error"

    result = {
        "status": "ok",
        "database": db_status
    }

    if check_overpass:
        client = get_overpass_client()
        result["overpass"] = client.check_api_status()

    return result
