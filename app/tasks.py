from celery.signals import setup_logging as celery_setup_logging

from app.database import models  # noqa: F401
from app.core.celery_config import celery_app
from app.core.exceptions import NotFoundError
from app.core.logging_config import setup_logging
from app.database.db import SessionLocal
from app.services.bookings import reconcile_all_events, reconcile_event_capacity


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    setup_logging()


@celery_app.task(bind=True)
def reconcile_event_task(self, event_id: int) -> dict | None:
    """Repair one event's remaining capacity from its reservation rows."""
    db = SessionLocal()
    try:
        return reconcile_event_capacity(db, event_id)
    except NotFoundError:
        return None
    finally:
        db.close()


@celery_app.task(bind=True)
def reconcile_all_events_task(self) -> list[dict]:
    db = SessionLocal()
    try:
        return reconcile_all_events(db)
    finally:
        db.close()
