from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.routes.deps import get_auth_context
from app.schemas.bookings import BookingOut, BookRequest
from app.schemas.events import EventOut
from app.services.bookings import BookingResult, book_event, cancel_booking, get_user_events
from app.services.sessions import AuthContext

router = APIRouter(prefix="/book", tags=["bookings"])


def _booking_out(result: BookingResult) -> dict:
    return {
        "event_id": result.event_id,
        "user_id": result.user_id,
        "remaining_capacity": result.remaining_capacity,
        "original_capacity": result.original_capacity,
        "reservation_set": sorted(result.reservation_set),
    }


@router.post("", response_model=BookingOut)
def book_ticket(
    payload: BookRequest,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    result = book_event(db, user_id=context.uid, event_id=payload.event_id)
    return _booking_out(result)


@router.delete("/{event_id}", response_model=BookingOut)
def cancel_ticket(
    event_id: int,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    result = cancel_booking(db, user_id=context.uid, event_id=event_id)
    return _booking_out(result)


@router.get("/mine", response_model=list[EventOut])
def my_events(context: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    return get_user_events(db, context.uid)
