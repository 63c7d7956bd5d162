from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, Role, get_current_user, require_role
from app.database.db import get_db
from app.schemas.events import EventOut
from app.schemas.registrations import (
    EventRosterOut,
    OrganizerRosterOut,
    RegisterRequest,
    RegistrationOut,
    RosterEntry,
)
from app.services import registrations as ledger
from app.services import views

router = APIRouter(prefix="/registration", tags=["registrations"])


@router.post("", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def register_for_event(
    payload: RegisterRequest,
    user: CurrentUser = Depends(require_role(Role.USER)),
    db: Session = Depends(get_db),
):
    return ledger.register(db, event_id=payload.event_id, user_id=user.user_id)


@router.post("/{registration_id}/cancel", response_model=RegistrationOut)
def cancel_registration(
    registration_id: int,
    user: CurrentUser = Depends(require_role(Role.USER)),
    db: Session = Depends(get_db),
):
    return ledger.cancel(db, registration_id=registration_id, user_id=user.user_id)


@router.get("/mine", response_model=list[RegistrationOut])
def my_registrations(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return views.list_user_registrations(db, user.user_id)


@router.get("/event/{event_id}", response_model=EventRosterOut)
def event_roster(
    event_id: int,
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    event, registrations = views.list_event_roster(db, event_id, user.user_id)
    return EventRosterOut(
        event=EventOut.model_validate(event),
        count=len(registrations),
        registrations=[RosterEntry.model_validate(r) for r in registrations],
    )


@router.get("/organizer", response_model=OrganizerRosterOut)
def organizer_roster(
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    registrations = views.list_organizer_roster(db, user.user_id)
    return OrganizerRosterOut(
        count=len(registrations),
        registrations=[RegistrationOut.model_validate(r) for r in registrations],
    )
