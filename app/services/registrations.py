"""Registration ledger: the only code path that moves an event's seat count.

``register`` and ``cancel`` each run as one transaction spanning the event row
and the registration row. Capacity is enforced by a conditional UPDATE and
uniqueness by the partial unique index on ``registrations``, so a stale read
can at worst turn into a rejected request, never an oversold event.
"""
import time
from datetime import datetime, timezone
from typing import Callable, TypeVar

import redis
from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.redis_config import get_redis_client
from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus
from app.services.errors import (
    AlreadyCancelledError,
    AlreadyRegisteredError,
    EventFullError,
    ForbiddenError,
    LedgerError,
    NotFoundError,
    TransientConflictError,
)

T = TypeVar("T")

# SQLite lock contention and PostgreSQL serialization failure / deadlock.
TRANSIENT_SQLSTATES = {"40001", "40P01"}
TRANSIENT_MESSAGES = ("database is locked", "database table is locked", "database is busy")


def is_transient(exc: OperationalError) -> bool:
    """Return True if a failed statement or commit is worth retrying."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) in TRANSIENT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(fragment in message for fragment in TRANSIENT_MESSAGES)


def _integrity_error_to_ledger_error(exc: IntegrityError) -> LedgerError:
    message = str(exc.orig).lower()
    if "foreign key" in message:
        return NotFoundError("Event not found.")
    if "check" in message or "ck_events_seat_count_bounds" in message:
        return EventFullError("Event is full.")
    return AlreadyRegisteredError("User is already registered for this event.")


def run_in_transaction(db: Session, operation: Callable[[Session], T], *, name: str) -> T:
    """
    Run ``operation`` and commit, retrying transient conflicts.

    The operation is re-executed from scratch on every attempt, so it must do
    its own reads. Whatever happens, a failed attempt is rolled back before the
    next one starts or the error leaves this function.
    """
    max_attempts = max(settings.REGISTRATION_MAX_RETRIES, 1)
    for attempt in range(1, max_attempts + 1):
        try:
            result = operation(db)
            db.commit()
            return result
        except LedgerError:
            db.rollback()
            raise
        except IntegrityError as exc:
            db.rollback()
            raise _integrity_error_to_ledger_error(exc) from exc
        except OperationalError as exc:
            db.rollback()
            if not is_transient(exc):
                logger.exception("{} failed with a non-retryable database error", name)
                raise
            logger.warning("{} hit a transient conflict (attempt {}/{}): {}", name, attempt, max_attempts, exc.orig)
            if attempt < max_attempts:
                time.sleep(settings.REGISTRATION_RETRY_BACKOFF * attempt)
        except Exception:
            db.rollback()
            logger.exception("{} failed", name)
            raise
    raise TransientConflictError(f"{name} could not commit after {max_attempts} attempts, please retry.")


def register(db: Session, *, event_id: int, user_id: int) -> Registration:
    """
    Reserve one seat on ``event_id`` for ``user_id``.

    Registrations for the same event queue on a Redis lock scoped to that
    event; other events are unaffected. The lock only reduces contention.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=settings.LOCK_TIMEOUT,
        blocking_timeout=settings.LOCK_BLOCKING_TIMEOUT,
    )
    if not lock.acquire(blocking=True):
        raise TransientConflictError("Could not acquire the event lock, please retry.")

    try:
        registration = run_in_transaction(
            db,
            lambda session: _register_in_transaction(session, event_id, user_id),
            name="register",
        )
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # The lock outlived its timeout; the transaction result still stands.
            logger.warning("Lock for event {} expired before release", event_id)

    db.refresh(registration)
    db.refresh(registration.event)
    logger.info("User {} registered for event {} (registration {})", user_id, event_id, registration.id)
    return registration


def _register_in_transaction(db: Session, event_id: int, user_id: int) -> Registration:
    event = db.get(Event, event_id, with_for_update=True, populate_existing=True)
    if event is None:
        raise NotFoundError("Event not found.")

    if event.seat_count >= event.capacity:
        logger.info("Rejected registration of user {} for event {}: event is full", user_id, event_id)
        raise EventFullError("Event is full.")

    existing = db.scalar(
        select(Registration.id).where(
            Registration.event_id == event_id,
            Registration.user_id == user_id,
            Registration.status == RegistrationStatus.CONFIRMED.value,
        )
    )
    if existing is not None:
        logger.info("Rejected registration of user {} for event {}: already registered", user_id, event_id)
        raise AlreadyRegisteredError("User is already registered for this event.")

    registration = Registration(
        event_id=event_id,
        user_id=user_id,
        status=RegistrationStatus.CONFIRMED.value,
    )
    db.add(registration)
    db.flush()

    res = db.execute(
        update(Event)
        .where(Event.id == event_id)
        .where(Event.seat_count < Event.capacity)
        .values(seat_count=Event.seat_count + 1)
    )
    if res.rowcount != 1:  # type: ignore
        raise EventFullError("Event is full.")
    return registration


def cancel(db: Session, *, registration_id: int, user_id: int) -> Registration:
    """Cancel ``registration_id`` on behalf of ``user_id`` and free its seat."""
    registration = run_in_transaction(
        db,
        lambda session: _cancel_in_transaction(session, registration_id, user_id),
        name="cancel",
    )
    db.refresh(registration)
    db.refresh(registration.event)
    logger.info("User {} cancelled registration {}", user_id, registration_id)
    return registration


def _cancel_in_transaction(db: Session, registration_id: int, user_id: int) -> Registration:
    registration = db.get(Registration, registration_id, with_for_update=True, populate_existing=True)
    if registration is None:
        raise NotFoundError("Registration not found.")
    if registration.user_id != user_id:
        raise ForbiddenError("You can only cancel your own registrations.")
    if registration.status == RegistrationStatus.CANCELLED.value:
        raise AlreadyCancelledError("Registration is already cancelled.")

    # The status predicate makes a concurrent second cancel a no-op here.
    res = db.execute(
        update(Registration)
        .where(Registration.id == registration_id)
        .where(Registration.status == RegistrationStatus.CONFIRMED.value)
        .values(status=RegistrationStatus.CANCELLED.value, cancelled_at=datetime.now(timezone.utc))
    )
    if res.rowcount != 1:  # type: ignore
        raise AlreadyCancelledError("Registration is already cancelled.")

    res = db.execute(
        update(Event)
        .where(Event.id == registration.event_id)
        .where(Event.seat_count > 0)
        .values(seat_count=Event.seat_count - 1)
    )
    if res.rowcount != 1:  # type: ignore
        logger.warning("Event {} already had no seats taken; seat count left at 0", registration.event_id)
    return registration
