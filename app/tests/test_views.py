"""
Test the read-only registration views and the seat count audit.
"""
import pytest
from sqlalchemy.orm import Session

from app.models.registrations import RegistrationStatus
from app.services.audit import find_seat_count_drift
from app.services.errors import ForbiddenError, NotFoundError
from app.services.registrations import cancel, register
from app.services.views import (
    get_event_stats,
    list_event_roster,
    list_organizer_roster,
    list_user_registrations,
)


class TestUserRegistrations:
    def test_all_statuses_newest_first(self, db_session: Session, make_event):
        first_event = make_event(title="First")
        second_event = make_event(title="Second")
        first = register(db_session, event_id=first_event.id, user_id=1)
        cancel(db_session, registration_id=first.id, user_id=1)
        second = register(db_session, event_id=second_event.id, user_id=1)
        register(db_session, event_id=second_event.id, user_id=2)

        registrations = list_user_registrations(db_session, 1)

        assert [r.id for r in registrations] == [second.id, first.id]
        assert [r.status for r in registrations] == [
            RegistrationStatus.CONFIRMED.value,
            RegistrationStatus.CANCELLED.value,
        ]
        assert registrations[0].event.title == "Second"

    def test_no_registrations(self, db_session: Session):
        assert list_user_registrations(db_session, 404) == []


class TestEventRoster:
    def test_roster_lists_confirmed_only(self, db_session: Session, make_event):
        event = make_event(owner_id=100)
        kept = register(db_session, event_id=event.id, user_id=1)
        dropped = register(db_session, event_id=event.id, user_id=2)
        cancel(db_session, registration_id=dropped.id, user_id=2)

        roster_event, roster = list_event_roster(db_session, event.id, owner_id=100)

        assert roster_event.id == event.id
        assert [r.id for r in roster] == [kept.id]

    def test_roster_for_non_owner(self, db_session: Session, make_event):
        event = make_event(owner_id=100)

        with pytest.raises(ForbiddenError):
            list_event_roster(db_session, event.id, owner_id=101)

    def test_roster_for_unknown_event(self, db_session: Session):
        with pytest.raises(NotFoundError):
            list_event_roster(db_session, 999, owner_id=100)


class TestOrganizerRoster:
    def test_roster_spans_owned_events(self, db_session: Session, make_event):
        mine_a = make_event(owner_id=100, title="A")
        mine_b = make_event(owner_id=100, title="B")
        theirs = make_event(owner_id=200, title="C")
        a1 = register(db_session, event_id=mine_a.id, user_id=1)
        b1 = register(db_session, event_id=mine_b.id, user_id=1)
        b2 = register(db_session, event_id=mine_b.id, user_id=2)
        cancel(db_session, registration_id=b2.id, user_id=2)
        register(db_session, event_id=theirs.id, user_id=3)

        roster = list_organizer_roster(db_session, 100)

        assert [r.id for r in roster] == [b1.id, a1.id]
        assert {r.event.title for r in roster} == {"A", "B"}


class TestEventStats:
    def test_stats(self, db_session: Session, make_event):
        event = make_event(capacity=5, owner_id=100)
        register(db_session, event_id=event.id, user_id=1)
        second = register(db_session, event_id=event.id, user_id=2)
        cancel(db_session, registration_id=second.id, user_id=2)

        stats = get_event_stats(db_session, event.id, owner_id=100)

        assert stats == {
            "event_id": event.id,
            "capacity": 5,
            "seat_count": 1,
            "available_seats": 4,
            "confirmed_count": 1,
            "cancelled_count": 1,
            "consistent": True,
        }


class TestSeatCountAudit:
    def test_no_drift_after_ledger_operations(self, db_session: Session, make_event):
        event = make_event(capacity=3)
        registration = register(db_session, event_id=event.id, user_id=1)
        register(db_session, event_id=event.id, user_id=2)
        cancel(db_session, registration_id=registration.id, user_id=1)
        make_event(capacity=3, title="Empty")

        assert find_seat_count_drift(db_session) == []

    def test_reports_counter_written_outside_the_ledger(self, db_session: Session, make_event):
        event = make_event(capacity=3)
        register(db_session, event_id=event.id, user_id=1)
        event.seat_count = 3
        db_session.commit()

        assert find_seat_count_drift(db_session) == [
            {"event_id": event.id, "seat_count": 3, "confirmed_count": 1}
        ]
