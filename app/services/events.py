from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.events import Event
from app.services.errors import CapacityTooLowError, ForbiddenError, NotFoundError
from app.services.registrations import run_in_transaction

EDITABLE_FIELDS = ("title", "description", "event_date", "location", "capacity")


def create_event(
    db: Session,
    *,
    owner_id: int,
    title: str,
    event_date: datetime,
    location: str,
    capacity: int,
    description: str = "",
) -> Event:
    event = Event(
        owner_id=owner_id,
        title=title,
        description=description,
        event_date=event_date,
        location=location,
        capacity=capacity,
        seat_count=0,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Organizer {} created event {} with capacity {}", owner_id, event.id, capacity)
    return event


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found.")
    return event


def get_owned_event(db: Session, event_id: int, owner_id: int) -> Event:
    """Load an event and check that ``owner_id`` organizes it."""
    event = get_event(db, event_id)
    if event.owner_id != owner_id:
        raise ForbiddenError("You can only manage your own events.")
    return event


def list_events(db: Session) -> list[Event]:
    return list(db.scalars(select(Event).order_by(Event.event_date, Event.id)))


def list_owner_events(db: Session, owner_id: int) -> list[Event]:
    return list(db.scalars(select(Event).where(Event.owner_id == owner_id).order_by(Event.event_date, Event.id)))


def update_event(db: Session, *, event_id: int, owner_id: int, changes: dict[str, Any]) -> Event:
    """
    Apply metadata edits to an event owned by ``owner_id``.

    A capacity change is written with a ``seat_count <= capacity`` predicate, so
    it is rejected with CapacityTooLowError if registrations committed in the
    meantime pushed the seat count above the requested value.
    """

    def _apply(session: Session) -> Event:
        event = session.get(Event, event_id, populate_existing=True)
        if event is None:
            raise NotFoundError("Event not found.")
        if event.owner_id != owner_id:
            raise ForbiddenError("You can only update your own events.")

        values = {field: value for field, value in changes.items() if field in EDITABLE_FIELDS and value is not None}
        new_capacity = values.get("capacity")
        if new_capacity is not None and new_capacity < 1:
            raise CapacityTooLowError("Capacity must be at least 1.")
        if new_capacity is not None and new_capacity < event.seat_count:
            raise CapacityTooLowError(
                f"Cannot reduce capacity below current registrations ({event.seat_count})."
            )
        if not values:
            return event

        stmt = update(Event).where(Event.id == event_id).values(**values)
        if new_capacity is not None:
            stmt = stmt.where(Event.seat_count <= new_capacity)
        res = session.execute(stmt)
        if res.rowcount != 1:  # type: ignore
            raise CapacityTooLowError("Cannot reduce capacity below current registrations.")
        return event

    event = run_in_transaction(db, _apply, name="update_event")
    db.refresh(event)
    logger.info("Organizer {} updated event {}: {}", owner_id, event_id, sorted(changes))
    return event


def delete_event(db: Session, *, event_id: int, owner_id: int) -> None:
    """Delete an event and all of its registrations in one transaction."""

    def _delete(session: Session) -> int:
        event = session.get(Event, event_id, with_for_update=True, populate_existing=True)
        if event is None:
            raise NotFoundError("Event not found.")
        if event.owner_id != owner_id:
            raise ForbiddenError("You can only delete your own events.")
        # Registrations go with the event through the relationship cascade.
        removed = len(event.registrations)
        session.delete(event)
        return removed

    removed = run_in_transaction(db, _delete, name="delete_event")
    logger.info("Organizer {} deleted event {} and {} registrations", owner_id, event_id, removed)
