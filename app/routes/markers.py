from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import events as event_repo
from app.database.db import get_db
from app.routes.deps import get_optional_auth_context
from app.schemas.map import MapOut
from app.services.map_view import build_markers, filter_by_category
from app.services.sessions import AuthContext

router = APIRouter(prefix="/map", tags=["map"])


@router.get("/markers", response_model=MapOut)
def markers(
    search: str | None = None,
    context: AuthContext | None = Depends(get_optional_auth_context),
    db: Session = Depends(get_db),
):
    """Markers for geolocated events; booking from a marker goes through POST /book."""
    events, no_events_found = filter_by_category(event_repo.list_events(db), search)
    return {
        "markers": build_markers(events, is_logged_in=context is not None),
        "no_events_found": no_events_found,
    }
