from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, Role, require_role
from app.database.db import get_db
from app.schemas.reports import EventStatsOut
from app.services.views import get_event_stats

router = APIRouter(prefix="/report", tags=["reports"])


@router.get("/event/{event_id}", response_model=EventStatsOut)
def event_report(
    event_id: int,
    user: CurrentUser = Depends(require_role(Role.ORGANIZER)),
    db: Session = Depends(get_db),
):
    """Seat usage for one event, including whether the counter matches its roster."""
    return get_event_stats(db, event_id, user.user_id)
