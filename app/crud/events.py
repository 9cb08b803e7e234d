"""CRUD facade over the `events` table.

Numeric fields (capacity, latitude, longitude) arrive already parsed and
range-checked by the request schemas; this layer only checks that the
required fields are present.
"""

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityOverflowError, ConflictError, NotFoundError
from app.models.events import Event
from app.models.reservations import Reservation

REQUIRED_FIELDS = ("name", "category", "location", "capacity")
EDITABLE_FIELDS = ("name", "category", "location", "latitude", "longitude", "description")


def list_events(db: Session) -> list[Event]:
    return list(db.scalars(select(Event).order_by(Event.created_at.desc(), Event.id.desc())))


def list_events_by_category(db: Session, category: str) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.category == category)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return list(db.scalars(stmt))


def list_recent_events(db: Session, limit: int = 5) -> list[Event]:
    stmt = select(Event).order_by(Event.created_at.desc(), Event.id.desc()).limit(limit)
    return list(db.scalars(stmt))


def get_event(db: Session, event_id: int) -> Event | None:
    return db.get(Event, event_id)


def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def count_reservations(db: Session, event_id: int) -> int:
    count = db.scalar(select(func.count(Reservation.id)).where(Reservation.event_id == event_id))
    return int(count or 0)


def create_event(db: Session, fields: dict[str, Any]) -> Event:
    missing = [name for name in REQUIRED_FIELDS if fields.get(name) in (None, "")]
    if missing:
        raise ValueError(f"Missing required event fields: {', '.join(missing)}")

    capacity = fields["capacity"]
    event = Event(
        name=fields["name"],
        category=fields["category"],
        location=fields["location"],
        latitude=fields.get("latitude"),
        longitude=fields.get("longitude"),
        description=fields.get("description") or "",
        original_capacity=capacity,
        remaining_capacity=capacity,
        version=1,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def update_event(db: Session, event_id: int, fields: dict[str, Any]) -> Event:
    """Replace the given fields of an event.

    A new `capacity` becomes the event's ceiling and the remaining count is
    recomputed from the reservations already held, so capacity can never be
    cut below what has been booked. The write only lands if no booking has
    touched the event since it was read.
    """
    event = get_event_or_404(db, event_id)
    values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
    # only the coordinates may be cleared
    values = {k: v for k, v in values.items() if v is not None or k in ("latitude", "longitude")}

    capacity = fields.get("capacity")
    if capacity is not None:
        booked = count_reservations(db, event_id)
        if capacity < booked:
            raise CapacityOverflowError(
                f"Capacity {capacity} is below the {booked} reservations already held"
            )
        values["original_capacity"] = capacity
        values["remaining_capacity"] = capacity - booked

    if not values:
        return event

    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.version == event.version)
        .values(**values, version=Event.version + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        db.rollback()
        raise ConflictError()

    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int) -> None:
    event = get_event_or_404(db, event_id)
    # reservations go with the event (relationship cascade)
    db.delete(event)
    db.commit()
