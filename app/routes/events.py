from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud import events as event_repo
from app.database.db import get_db
from app.schemas.events import EventOut, EventStatsOut
from app.services.bookings import get_event_stats

router = APIRouter(prefix="/event", tags=["events"])


@router.get("", response_model=list[EventOut])
def list_events(category: str | None = None, db: Session = Depends(get_db)):
    if category:
        return event_repo.list_events_by_category(db, category)
    return event_repo.list_events(db)


@router.get("/recent", response_model=list[EventOut])
def recent_events(limit: int = Query(default=5, ge=1, le=100), db: Session = Depends(get_db)):
    return event_repo.list_recent_events(db, limit)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return event_repo.get_event_or_404(db, event_id)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    return get_event_stats(db, event_id)
