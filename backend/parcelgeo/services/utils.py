import logging
from typing import Any, Dict, List, Optional

from geoalchemy2.elements import WKBElement
from geoalchemy2.shape import from_shape
from shapely.geometry import box
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from parcelgeo.core.config import get_settings
from parcelgeo.models.listing import Listing, ListingPolygon
from parcelgeo.services.geometry.kernel import polygon_from_geojson

logger = logging.getLogger(__name__)


def geojson_polygon_to_geography(geojson: dict) -> WKBElement:
    """Convert GeoJSON Polygon to PostGIS Geography."""
    if not geojson:
        raise ValueError("Polygon GeoJSON is empty")

    polygon = polygon_from_geojson(geojson)
    if polygon.is_empty or not polygon.is_valid:
        raise ValueError("Polygon is invalid")

    return from_shape(polygon, srid=4326)


def fetch_overlap_candidates(
    db: Session,
    geojson: dict,
    exclude_listing_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Existing listing polygons whose stored geography touches the bbox of a new polygon.

    Listings in excluded statuses (drafts, archived) are skipped. Rows whose
    geography has not been backfilled yet are always returned so the
    in-memory comparison can still see them.

    Args:
        db: Database session
        geojson: GeoJSON Polygon of the new listing
        exclude_listing_id: Listing being edited, never compared with itself

    Returns:
        List of dicts with listing_id, listing_title and geojson
    """
    settings = get_settings()
    polygon = polygon_from_geojson(geojson)
    envelope_wkt = f"SRID=4326;{box(*polygon.bounds).wkt}"

    query = (
        db.query(ListingPolygon.listing_id, ListingPolygon.geojson, Listing.title)
        .join(Listing, Listing.id == ListingPolygon.listing_id)
        .filter(Listing.status.notin_(settings.overlap_excluded_statuses))
        .filter(
            or_(
                ListingPolygon.geom.is_(None),
                func.ST_Intersects(ListingPolygon.geom, func.ST_GeogFromText(envelope_wkt)),
            )
        )
    )
    if exclude_listing_id:
        query = query.filter(ListingPolygon.listing_id != exclude_listing_id)

    rows = query.all()
    logger.info(f"Found {len(rows)} existing polygons to check (excluding: {exclude_listing_id or 'none'})")

    return [
        {"listing_id": row.listing_id, "listing_title": row.title, "geojson": row.geojson}
        for row in rows
    ]


def backfill_listing_geography(db: Session, listing_polygon: ListingPolygon) -> bool:
    """
    Populate the geography column of a listing polygon from its GeoJSON.

    Returns:
        True if the column was written, False if the GeoJSON is unusable
    """
    try:
        listing_polygon.geom = geojson_polygon_to_geography(listing_polygon.geojson)
        return True
    except ValueError as e:
        logger.warning(f"Cannot store geography for listing {listing_polygon.listing_id}: {str(e)}")
        return False
