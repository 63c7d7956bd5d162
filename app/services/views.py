"""Read-only projections over events and registrations.

Nothing here opens a write transaction; results reflect the last committed
state of the ledger.
"""
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus
from app.services.events import get_owned_event


def list_user_registrations(db: Session, user_id: int) -> list[Registration]:
    """All of a user's registrations, any status, newest first."""
    stmt = (
        select(Registration)
        .options(joinedload(Registration.event))
        .where(Registration.user_id == user_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def list_event_roster(db: Session, event_id: int, owner_id: int) -> tuple[Event, list[Registration]]:
    """CONFIRMED registrations for one event, visible to its owner only."""
    event = get_owned_event(db, event_id, owner_id)
    stmt = (
        select(Registration)
        .where(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.CONFIRMED.value,
        )
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return event, list(db.scalars(stmt))


def list_organizer_roster(db: Session, owner_id: int) -> list[Registration]:
    """CONFIRMED registrations across every event the organizer owns."""
    stmt = (
        select(Registration)
        .join(Registration.event)
        .options(joinedload(Registration.event))
        .where(
            Event.owner_id == owner_id,
            Registration.status == RegistrationStatus.CONFIRMED.value,
        )
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def get_event_stats(db: Session, event_id: int, owner_id: int) -> dict:
    event = get_owned_event(db, event_id, owner_id)

    counts = dict(
        db.execute(
            select(Registration.status, func.count(Registration.id))
            .where(Registration.event_id == event_id)
            .group_by(Registration.status)
        ).all()
    )
    confirmed = int(counts.get(RegistrationStatus.CONFIRMED.value, 0))

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "seat_count": event.seat_count,
        "available_seats": event.available_seats,
        "confirmed_count": confirmed,
        "cancelled_count": int(counts.get(RegistrationStatus.CANCELLED.value, 0)),
        "consistent": confirmed == event.seat_count,
    }
