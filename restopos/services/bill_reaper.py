"""Hourly cleanup of expired bills and their hosted images."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from restopos.core.config import settings
from restopos.db import session as db_session
from restopos.models.bill import Bill
from restopos.services.image_store import CloudinaryImageStore, get_image_store
from restopos.utils.time import utc_now, next_run_at

logger = logging.getLogger(__name__)


def _delete_images(bill: Bill, image_store: CloudinaryImageStore) -> None:
    for public_id in (bill.bill_store_public_id, bill.modified_bill_store_public_id):
        if public_id:
            image_store.delete(public_id)


def reap_expired_bills(db: Session, image_store: CloudinaryImageStore, now: datetime | None = None) -> int:
    """Delete every bill whose ``expires_at`` has passed, images first.

    Image deletes are best effort. A bill that cannot be deleted is rolled back
    and logged; the remaining bills are still processed. Returns the number of
    deleted rows.
    """
    now = now or utc_now()
    bill_ids = list(db.scalars(select(Bill.id).where(Bill.expires_at <= now).order_by(Bill.id)).all())
    if not bill_ids:
        return 0

    logger.info("[REAPER] Found %s expired bill(s)", len(bill_ids))
    deleted = 0
    for bill_id in bill_ids:
        try:
            bill = db.get(Bill, bill_id)
            if bill is None:
                continue
            _delete_images(bill, image_store)
            db.delete(bill)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("[REAPER] Failed to delete bill %s", bill_id)
            continue
        deleted += 1
        logger.info("[REAPER] Deleted bill %s", bill_id)
    return deleted


def run_reaper_pass() -> int:
    """One pass with a fresh session and image store client."""
    db = db_session.SessionLocal()
    try:
        return reap_expired_bills(db, get_image_store())
    finally:
        db.close()


async def run_bill_reaper_forever() -> None:
    """Run a pass at the configured minute of every hour until cancelled."""
    while True:
        now = utc_now()
        wake_at = next_run_at(now, settings.bill_reaper_minute)
        await asyncio.sleep((wake_at - now).total_seconds())
        logger.info("[REAPER] Checking for expired bills")
        try:
            await asyncio.to_thread(run_reaper_pass)
        except Exception:
            logger.exception("[REAPER] Reaper pass failed")
