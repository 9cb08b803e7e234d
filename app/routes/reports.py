from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.routes.deps import require_admin
from app.schemas.reports import ReportOut
from app.services.bookings import get_overall_report
from app.services.sessions import AuthContext

router = APIRouter(prefix="/report", tags=["reports"])


@router.get("", response_model=ReportOut)
def overall_report(_: AuthContext = Depends(require_admin), db: Session = Depends(get_db)):
    """Aggregate report across all events."""
    return get_overall_report(db)
