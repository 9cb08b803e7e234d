"""
Concurrent booking against a single event.

Every thread gets its own session on a file-backed SQLite database so the
transactions really are separate; the per-event lock is backed by fakeredis.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import CapacityExhaustedError, ConflictError, NotBookedError
from app.database.db import Base
from app.models.events import Event
from app.models.reservations import Reservation
from app.services.bookings import book_event, cancel_booking
from app.tests.factories import make_event, make_user


@pytest.fixture
def file_sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _attempt(factory, action, user_id: str, event_id: int) -> str:
    db = factory()
    try:
        action(db, user_id=user_id, event_id=event_id)
        return "ok"
    except (CapacityExhaustedError, ConflictError, NotBookedError) as exc:
        return type(exc).__name__
    finally:
        db.close()


def _counts(factory, event_id: int) -> tuple[int, int]:
    db = factory()
    try:
        remaining = db.scalar(select(Event.remaining_capacity).where(Event.id == event_id))
        reservations = db.scalar(select(func.count(Reservation.id)).where(Reservation.event_id == event_id))
        return remaining, reservations
    finally:
        db.close()


def test_two_users_race_for_last_spot(file_sessions):
    db = file_sessions()
    make_user(db, "u1")
    make_user(db, "u2")
    event_id = make_event(db, capacity=1).id
    db.close()

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [executor.submit(_attempt, file_sessions, book_event, uid, event_id) for uid in ("u1", "u2")]
        results = [f.result() for f in futures]

    assert results.count("ok") == 1
    assert set(results) - {"ok"} <= {"CapacityExhaustedError", "ConflictError"}
    assert _counts(file_sessions, event_id) == (0, 1)


def test_ten_concurrent_bookings_for_three_spots(file_sessions):
    db = file_sessions()
    user_ids = [f"u{i}" for i in range(1, 11)]
    for uid in user_ids:
        make_user(db, uid)
    event_id = make_event(db, capacity=3).id
    db.close()

    with ThreadPoolExecutor(max_workers=len(user_ids)) as executor:
        futures = [executor.submit(_attempt, file_sessions, book_event, uid, event_id) for uid in user_ids]
        results = [f.result() for f in futures]

    assert results.count("ok") == 3
    remaining, reservations = _counts(file_sessions, event_id)
    assert remaining == 0
    assert reservations == 3


def test_concurrent_double_cancel_does_not_inflate_capacity(file_sessions):
    db = file_sessions()
    make_user(db, "u1")
    event_id = make_event(db, capacity=2).id
    book_event(db, user_id="u1", event_id=event_id)
    db.close()

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [executor.submit(_attempt, file_sessions, cancel_booking, "u1", event_id) for _ in range(2)]
        results = [f.result() for f in futures]

    assert results.count("ok") == 1
    assert _counts(file_sessions, event_id) == (2, 0)
