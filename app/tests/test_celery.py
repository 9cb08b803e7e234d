"""
Test Celery tasks.
"""
from unittest.mock import patch

from sqlalchemy.orm import Session

from app.core.celery_config import celery_app
from app.models.reservations import Reservation
from app.tasks import reconcile_all_events_task, reconcile_event_task
from app.tests.factories import make_event, make_user


class TestCeleryTasks:
    """Test Celery task functionality."""

    def test_reconcile_event_task_repairs_drift(self, db_session: Session, session_factory):
        make_user(db_session, "u1")
        event = make_event(db_session, capacity=5, remaining=1)
        db_session.add(Reservation(user_id="u1", event_id=event.id))
        db_session.commit()

        with patch("app.tasks.SessionLocal", return_value=session_factory()):
            result = reconcile_event_task.run(event.id)

        assert result["previous_remaining"] == 1
        assert result["remaining_capacity"] == 4
        assert result["repaired"] is True
        db_session.refresh(event)
        assert event.remaining_capacity == 4

    def test_reconcile_event_task_with_nonexistent_event(self, session_factory):
        with patch("app.tasks.SessionLocal", return_value=session_factory()):
            assert reconcile_event_task.run(99999) is None

    def test_reconcile_all_events_task(self, db_session: Session, session_factory):
        healthy = make_event(db_session, capacity=3)
        drifted = make_event(db_session, capacity=3, remaining=0)

        with patch("app.tasks.SessionLocal", return_value=session_factory()):
            results = reconcile_all_events_task.run()

        by_id = {r["event_id"]: r for r in results}
        assert by_id[healthy.id]["repaired"] is False
        assert by_id[drifted.id]["repaired"] is True
        db_session.refresh(drifted)
        assert drifted.remaining_capacity == 3

    def test_celery_app_configuration(self):
        assert celery_app.conf.task_serializer == "json"
        assert celery_app.conf.result_serializer == "json"
        assert "json" in celery_app.conf.accept_content
        assert celery_app.conf.task_track_started is True

    def test_reconcile_is_scheduled(self):
        entry = celery_app.conf.beat_schedule["reconcile-event-capacity"]
        assert entry["task"] == "app.tasks.reconcile_all_events_task"

    def test_tasks_are_registered(self):
        assert "app.tasks.reconcile_event_task" in celery_app.tasks
        assert "app.tasks.reconcile_all_events_task" in celery_app.tasks
