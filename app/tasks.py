from loguru import logger

from app.core.celery_config import celery_app
from app.database.db import SessionLocal
from app.services.audit import find_seat_count_drift


@celery_app.task(bind=True)
def audit_seat_counts_task(self) -> list[dict]:
    """Report events whose seat count disagrees with their CONFIRMED registrations."""
    db = SessionLocal()
    try:
        drift = find_seat_count_drift(db)
    finally:
        db.close()

    if drift:
        logger.warning("Seat count audit found {} inconsistent events", len(drift))
    else:
        logger.info("Seat count audit found no drift")
    return drift
