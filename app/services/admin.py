from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

from app.core.exceptions import ConfirmationRequiredError
from app.crud import events as event_repo
from app.models.events import Event


class AdminCatalogManager:
    """Catalog editing for administrators.

    Holds the catalog as last listed and re-lists it in full after every
    mutation.
    """

    def __init__(self, db: Session):
        self.db = db
        self.events: list[Event] = []

    def refresh(self) -> list[Event]:
        self.events = event_repo.list_events(self.db)
        return self.events

    def create(self, fields: dict[str, Any]) -> Event:
        event = event_repo.create_event(self.db, fields)
        logger.info(f"Admin created event {event.id} ({event.name!r}, capacity {event.original_capacity})")
        self.refresh()
        return event

    def update(self, event_id: int, fields: dict[str, Any]) -> Event:
        event = event_repo.update_event(self.db, event_id, fields)
        logger.info(f"Admin updated event {event_id}: {sorted(fields)}")
        self.refresh()
        return event

    def delete(self, event_id: int, *, confirm: bool) -> None:
        if not confirm:
            raise ConfirmationRequiredError(f"Deleting event {event_id} must be confirmed")
        event_repo.delete_event(self.db, event_id)
        logger.info(f"Admin deleted event {event_id}")
        self.refresh()
