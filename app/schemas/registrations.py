from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.events import EventOut, EventSummary


class RegisterRequest(BaseModel):
    event_id: int = Field(ge=1)


class RegistrationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    status: str
    created_at: datetime
    cancelled_at: datetime | None = None
    event: EventSummary


class RosterEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: str
    created_at: datetime


class EventRosterOut(BaseModel):
    event: EventOut
    count: int
    registrations: list[RosterEntry]


class OrganizerRosterOut(BaseModel):
    count: int
    registrations: list[RegistrationOut]
