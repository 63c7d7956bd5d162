from loguru import logger
from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus


def find_seat_count_drift(db: Session) -> list[dict]:
    """
    Compare every event's seat count with its CONFIRMED registrations.

    Returns one entry per event where the two disagree. Counters are reported,
    never rewritten: a drift means some write bypassed the ledger.
    """
    confirmed = func.count(Registration.id)
    stmt = (
        select(Event.id, Event.seat_count, confirmed)
        .outerjoin(
            Registration,
            and_(
                Registration.event_id == Event.id,
                Registration.status == RegistrationStatus.CONFIRMED.value,
            ),
        )
        .group_by(Event.id, Event.seat_count)
        .having(Event.seat_count != confirmed)
        .order_by(Event.id)
    )
    drift = [
        {"event_id": event_id, "seat_count": seat_count, "confirmed_count": int(count)}
        for event_id, seat_count, count in db.execute(stmt)
    ]
    for entry in drift:
        logger.warning(
            "Event {event_id} seat count {seat_count} != {confirmed_count} confirmed registrations",
            **entry,
        )
    return drift
