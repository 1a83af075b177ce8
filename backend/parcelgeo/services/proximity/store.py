"""Persistence of proximity records, one row per listing."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parcelgeo.models.proximity_analysis import ProximityAnalysis
from parcelgeo.services.proximity.analyzer import ProximityRecord

logger = logging.getLogger(__name__)


class ProximityStore:
    """Upserts proximity records keyed by listing id."""

    def __init__(self, db: Session):
        """
        Initialize proximity store.

        Args:
            db: Database session
        """
        self.db = db

    def get(self, listing_id: str) -> Optional[ProximityAnalysis]:
        return (
            self.db.query(ProximityAnalysis)
            .filter(ProximityAnalysis.listing_id == listing_id)
            .first()
        )

    def upsert(self, record: ProximityRecord) -> ProximityAnalysis:
        """
        Insert or overwrite the proximity row of a listing.

        Args:
            record: Freshly computed proximity record

        Returns:
            The stored ProximityAnalysis row
        """
        try:
            row = self._write(record)
        except IntegrityError:
            # A concurrent writer inserted the row first; overwrite it instead
            self.db.rollback()
            logger.info(f"Proximity row for listing {record.listing_id} created concurrently, updating")
            row = self._write(record)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Proximity analysis saved for listing {record.listing_id}")
        return row

    def _write(self, record: ProximityRecord) -> ProximityAnalysis:
        row = self.get(record.listing_id)
        if row is None:
            row = ProximityAnalysis(listing_id=record.listing_id)
            self.db.add(row)

        for key, value in record.to_dict().items():
            if key != "listing_id":
                setattr(row, key, value)

        self.db.commit()
        self.db.refresh(row)
        return row
