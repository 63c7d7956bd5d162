from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    event_date: datetime
    location: str = Field(min_length=1, max_length=200)
    capacity: int = Field(ge=1)


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    event_date: datetime | None = None
    location: str | None = Field(default=None, min_length=1, max_length=200)
    capacity: int | None = Field(default=None, ge=1)


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    event_date: datetime
    location: str
    capacity: int
    seat_count: int
    available_seats: int
    is_full: bool
    owner_id: int


class EventSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    event_date: datetime
    location: str
