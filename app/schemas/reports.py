from pydantic import BaseModel


class EventStatsOut(BaseModel):
    event_id: int
    capacity: int
    seat_count: int
    available_seats: int
    confirmed_count: int
    cancelled_count: int
    consistent: bool
