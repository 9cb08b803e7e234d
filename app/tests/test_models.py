"""
Test database models (Event, Reservation, User).
"""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.events import Event
from app.models.reservations import Reservation
from app.tests.factories import make_event, make_user


class TestEventModel:
    """Test the Event model."""

    def test_create_event(self, db_session: Session):
        event = make_event(db_session, capacity=100, name="Test Event")

        assert event.id is not None
        assert event.name == "Test Event"
        assert event.original_capacity == 100
        assert event.remaining_capacity == 100
        assert event.booked_count == 0
        assert event.version == 1
        assert event.created_at is not None

    def test_remaining_cannot_go_negative(self, db_session: Session):
        db_session.add(
            Event(
                name="Broken",
                category="music",
                location="Nowhere",
                original_capacity=5,
                remaining_capacity=-1,
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_remaining_cannot_exceed_original(self, db_session: Session):
        db_session.add(
            Event(
                name="Inflated",
                category="music",
                location="Nowhere",
                original_capacity=5,
                remaining_capacity=6,
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_is_geolocated(self, db_session: Session):
        placed = make_event(db_session, latitude=0.0, longitude=0.0)
        unplaced = make_event(db_session, latitude=None, longitude=-1.4)

        assert placed.is_geolocated is True
        assert unplaced.is_geolocated is False


class TestReservationModel:
    """Test the Reservation model."""

    def test_reservation_set(self, db_session: Session):
        user = make_user(db_session, "u1")
        first = make_event(db_session, name="First")
        second = make_event(db_session, name="Second")

        db_session.add_all(
            [
                Reservation(user_id=user.uid, event_id=first.id),
                Reservation(user_id=user.uid, event_id=second.id),
            ]
        )
        db_session.commit()
        db_session.refresh(user)

        assert user.reservation_set == {first.id, second.id}

    def test_duplicate_reservation_rejected(self, db_session: Session):
        user = make_user(db_session, "u1")
        event = make_event(db_session)

        db_session.add(Reservation(user_id=user.uid, event_id=event.id))
        db_session.commit()

        db_session.add(Reservation(user_id=user.uid, event_id=event.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_deleting_event_removes_its_reservations(self, db_session: Session):
        user = make_user(db_session, "u1")
        event = make_event(db_session)
        db_session.add(Reservation(user_id=user.uid, event_id=event.id))
        db_session.commit()

        db_session.delete(event)
        db_session.commit()

        assert db_session.query(Reservation).count() == 0
