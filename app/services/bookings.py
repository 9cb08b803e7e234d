"""Booking protocol: a user's reservation set and an event's remaining capacity
are always mutated together, in one transaction, under a per-event lock, with
a version-checked write of the capacity counter.
"""

from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AlreadyBookedError,
    CapacityExhaustedError,
    CapacityOverflowError,
    ConflictError,
    NotBookedError,
    NotFoundError,
)
from app.crud.events import count_reservations
from app.crud.user import get_reservation_set
from app.models.events import Event
from app.models.reservations import Reservation
from app.models.users import User
from app.services.transactions import transact


@dataclass
class BookingResult:
    event_id: int
    user_id: str
    remaining_capacity: int
    original_capacity: int
    reservation_set: set[int] = field(default_factory=set)


def book_event(db: Session, *, user_id: str, event_id: int) -> BookingResult:
    """Add `event_id` to the user's reservation set and take one spot."""
    result = transact(
        db,
        lambda s: _book_in_transaction(s, user_id, event_id),
        lock_key=event_id,
        label=f"book event {event_id} for {user_id}",
    )
    logger.info(f"User {user_id} booked event {event_id}, {result.remaining_capacity} spots left")
    return result


def cancel_booking(db: Session, *, user_id: str, event_id: int) -> BookingResult:
    """Remove `event_id` from the user's reservation set and give the spot back."""
    result = transact(
        db,
        lambda s: _cancel_in_transaction(s, user_id, event_id),
        lock_key=event_id,
        label=f"cancel event {event_id} for {user_id}",
    )
    logger.info(f"User {user_id} cancelled event {event_id}, {result.remaining_capacity} spots left")
    return result


def _load_pair(db: Session, user_id: str, event_id: int) -> tuple[User, Event]:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    # always re-read the event: its version is what the write is conditioned on
    event = db.get(Event, event_id, populate_existing=True)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return user, event


def _compare_and_set_remaining(db: Session, event: Event, remaining: int) -> int:
    """Write `remaining` only if nobody wrote the event since we read it."""
    stmt = (
        update(Event)
        .where(Event.id == event.id)
        .where(Event.version == event.version)
        .values(remaining_capacity=remaining, version=Event.version + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise ConflictError()
    return remaining


def _book_in_transaction(db: Session, user_id: str, event_id: int) -> BookingResult:
    user, event = _load_pair(db, user_id, event_id)
    reserved = get_reservation_set(db, user.uid)

    if event.id in reserved:
        raise AlreadyBookedError()
    if event.remaining_capacity <= 0:
        raise CapacityExhaustedError()

    remaining = _compare_and_set_remaining(db, event, event.remaining_capacity - 1)
    db.add(Reservation(user_id=user.uid, event_id=event.id))
    try:
        db.flush()
    except IntegrityError as exc:
        # same user racing themselves; the unique constraint caught the second one
        raise AlreadyBookedError() from exc

    return BookingResult(
        event_id=event.id,
        user_id=user.uid,
        remaining_capacity=remaining,
        original_capacity=event.original_capacity,
        reservation_set=reserved | {event.id},
    )


def _cancel_in_transaction(db: Session, user_id: str, event_id: int) -> BookingResult:
    user, event = _load_pair(db, user_id, event_id)
    reserved = get_reservation_set(db, user.uid)

    if event.id not in reserved:
        raise NotBookedError()
    if event.remaining_capacity >= event.original_capacity:
        logger.warning(
            f"Event {event.id} is already at its original capacity "
            f"({event.original_capacity}) while user {user.uid} holds a reservation"
        )
        raise CapacityOverflowError()

    res = db.execute(
        delete(Reservation)
        .where(Reservation.user_id == user.uid)
        .where(Reservation.event_id == event.id)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:  # type: ignore
        raise NotBookedError()
    remaining = _compare_and_set_remaining(db, event, event.remaining_capacity + 1)

    return BookingResult(
        event_id=event.id,
        user_id=user.uid,
        remaining_capacity=remaining,
        original_capacity=event.original_capacity,
        reservation_set=reserved - {event.id},
    )


def get_user_events(db: Session, user_id: str) -> list[Event]:
    """Events in the user's reservation set.

    Reservations pointing at events that no longer exist are dropped from the
    result and pruned from the store.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")

    rows = db.execute(
        select(Reservation, Event)
        .outerjoin(Event, Reservation.event_id == Event.id)
        .where(Reservation.user_id == user_id)
        .order_by(Reservation.created_at, Reservation.id)
    ).all()

    events = [event for _, event in rows if event is not None]
    dangling = [reservation.id for reservation, event in rows if event is None]
    if dangling:
        logger.warning(f"Pruning {len(dangling)} reservations of user {user_id} for deleted events")
        db.execute(
            delete(Reservation)
            .where(Reservation.id.in_(dangling))
            .execution_options(synchronize_session=False)
        )
        db.commit()
    return events


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")

    reservation_count = count_reservations(db, event_id)
    return {
        "event_id": event.id,
        "capacity": event.original_capacity,
        "remaining_capacity": event.remaining_capacity,
        "booked_count": event.booked_count,
        "reservation_count": reservation_count,
        "consistent": reservation_count == event.booked_count,
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.original_capacity)))
    total_remaining = db.scalar(select(func.sum(Event.remaining_capacity)))
    total_reservations = db.scalar(select(func.count(Reservation.id)))

    total_capacity = int(total_capacity or 0)
    total_remaining = int(total_remaining or 0)
    return {
        "total_capacity": total_capacity,
        "total_remaining": total_remaining,
        "total_reserved": total_capacity - total_remaining,
        "total_reservations": int(total_reservations or 0),
    }


def reconcile_event_capacity(db: Session, event_id: int) -> dict:
    """Recompute the remaining count of one event from its reservation rows."""

    def _reconcile(s: Session) -> dict:
        event = s.get(Event, event_id, populate_existing=True)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")

        reservation_count = count_reservations(s, event_id)
        expected = min(max(event.original_capacity - reservation_count, 0), event.original_capacity)
        previous = event.remaining_capacity
        if expected != previous:
            _compare_and_set_remaining(s, event, expected)
            logger.warning(
                f"Event {event_id} capacity drift: remaining {previous} -> {expected} "
                f"({reservation_count} reservations, capacity {event.original_capacity})"
            )
        return {
            "event_id": event_id,
            "previous_remaining": previous,
            "remaining_capacity": expected,
            "reservation_count": reservation_count,
            "repaired": expected != previous,
        }

    return transact(db, _reconcile, lock_key=event_id, label=f"reconcile event {event_id}")


def reconcile_all_events(db: Session) -> list[dict]:
    event_ids = list(db.scalars(select(Event.id).order_by(Event.id)))
    results = []
    for event_id in event_ids:
        try:
            results.append(reconcile_event_capacity(db, event_id))
        except NotFoundError:
            # deleted since listing
            continue
    repaired = sum(1 for r in results if r["repaired"])
    logger.info(f"Reconciled {len(results)} events, repaired {repaired}")
    return results
