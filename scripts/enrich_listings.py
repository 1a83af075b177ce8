#!/usr/bin/env python3
"""Script to fill administrative boundaries and proximity data of existing listings."""

import sys
import os
import argparse
import logging
import time

# Add backend to path - Docker container uses /app as working directory
backend_path = os.path.join(os.path.dirname(__file__), "..", "backend")
if os.path.exists(backend_path):
    sys.path.insert(0, backend_path)
if os.path.exists("/app"):
    sys.path.insert(0, "/app")

from sqlalchemy import text
from sqlalchemy.orm import Session
from parcelgeo.db.session import SessionLocal
from parcelgeo.core.config import get_settings
from parcelgeo.models.listing import Listing, ListingPolygon
from parcelgeo.services.boundaries import BoundaryResolver, SqlBoundaryCatalog
from parcelgeo.services.osm import AmenitySourceError, get_amenity_cache, get_overpass_client
from parcelgeo.services.proximity import ProximityAnalysisError, ProximityAnalyzer, ProximityStore
from parcelgeo.services.utils import backfill_listing_geography

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def wait_for_database(max_retries: int = 30, retry_delay: int = 2) -> bool:
    """Wait for database to be available."""
    logger.info("Waiting for database to be available...")

    for i in range(max_retries):
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            logger.info("Database is available")
            return True
        except Exception as e:
            if i < max_retries - 1:
                logger.info(f"Database not ready yet (attempt {i+1}/{max_retries}), waiting {retry_delay}s...")
                time.sleep(retry_delay)
            else:
                logger.error(f"Database not available after {max_retries} attempts: {str(e)}")
        finally:
            db.close()

    return False


def enrich_listing(
    db: Session,
    listing: Listing,
    listing_polygon: ListingPolygon,
    resolver: BoundaryResolver,
    analyzer: ProximityAnalyzer,
    skip_proximity: bool = False,
) -> bool:
    """
    Resolve boundaries and proximity data of one listing.

    Returns:
        True if the listing was fully enriched
    """
    if listing_polygon.geom is None:
        backfill_listing_geography(db, listing_polygon)

    match = resolver.resolve(listing_polygon.geojson)
    listing.region_id = match.region_id
    listing.district_id = match.district_id
    listing.ward_id = match.ward_id
    listing.street_village_id = match.street_village_id
    db.commit()
    logger.info(f"Listing {listing.id}: matched levels {', '.join(match.matched_levels) or 'none'}")

    if skip_proximity:
        return True

    try:
        record = analyzer.analyze(listing.id, listing_polygon.geojson)
    except (AmenitySourceError, ProximityAnalysisError) as e:
        logger.warning(f"Listing {listing.id}: proximity analysis skipped: {str(e)}")
        return False

    ProximityStore(db).upsert(record)
    return True


def main():
    """Main function for listing enrichment."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--listing-id", help="Only enrich this listing")
    parser.add_argument("--skip-proximity", action="store_true", help="Only resolve administrative boundaries")
    args = parser.parse_args()

    settings = get_settings()

    if not wait_for_database():
        logger.error("Failed to connect to database, exiting...")
        return 1

    db = SessionLocal()
    try:
        query = db.query(Listing, ListingPolygon).join(ListingPolygon, ListingPolygon.listing_id == Listing.id)
        if args.listing_id:
            query = query.filter(Listing.id == args.listing_id)
        rows = query.order_by(Listing.created_at).all()
        logger.info(f"Enriching {len(rows)} listings")

        resolver = BoundaryResolver(SqlBoundaryCatalog(db))
        cache = get_amenity_cache() if settings.amenity_cache_enabled else None
        analyzer = ProximityAnalyzer(client=get_overpass_client(), cache=cache, settings=settings)

        enriched = 0
        failed = 0
        # Sequential on purpose: the Overpass API throttles concurrent clients
        for listing, listing_polygon in rows:
            try:
                if enrich_listing(db, listing, listing_polygon, resolver, analyzer, args.skip_proximity):
                    enriched += 1
                else:
                    failed += 1
            except Exception as e:
                db.rollback()
                failed += 1
                logger.error(f"Listing {listing.id}: enrichment failed: {str(e)}", exc_info=True)

        logger.info(f"Enrichment completed: {enriched} enriched, {failed} failed")
        return 0 if failed == 0 else 1

    except Exception as e:
        logger.error(f"Unexpected error during listing enrichment: {str(e)}", exc_info=True)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
