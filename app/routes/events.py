from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, Role, require_role
from app.database.db import get_db
from app.schemas.events import EventCreate, EventOut, EventUpdate
from app.services import events as event_service

router = APIRouter(prefix="/event", tags=["events"])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    return event_service.create_event(db, owner_id=user.user_id, **payload.model_dump())


@router.get("", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    return event_service.list_events(db)


@router.get("/mine", response_model=list[EventOut])
def my_events(
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    return event_service.list_owner_events(db, user.user_id)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    return event_service.update_event(
        db, event_id=event_id, owner_id=user.user_id, changes=payload.model_dump(exclude_unset=True)
    )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    event_service.delete_event(db, event_id=event_id, owner_id=user.user_id)
