from fastapi import APIRouter, Depends, status
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import BackendUnavailableError
from app.database.db import get_db
from app.routes.deps import require_admin
from app.schemas.events import CatalogOut, EventCreate, EventUpdate, ReconcileOut
from app.schemas.reports import TaskQueuedOut
from app.services.admin import AdminCatalogManager
from app.services.bookings import reconcile_event_capacity
from app.services.sessions import AuthContext
from app.tasks import reconcile_all_events_task

router = APIRouter(prefix="/admin", tags=["admin"])


def get_catalog_manager(db: Session = Depends(get_db)) -> AdminCatalogManager:
    return AdminCatalogManager(db)


@router.get("/events", response_model=CatalogOut)
def list_catalog(
    _: AuthContext = Depends(require_admin),
    manager: AdminCatalogManager = Depends(get_catalog_manager),
):
    return {"events": manager.refresh()}


@router.post("/events", response_model=CatalogOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    _: AuthContext = Depends(require_admin),
    manager: AdminCatalogManager = Depends(get_catalog_manager),
):
    manager.create(payload.model_dump())
    return {"events": manager.events}


@router.put("/events/{event_id}", response_model=CatalogOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    _: AuthContext = Depends(require_admin),
    manager: AdminCatalogManager = Depends(get_catalog_manager),
):
    manager.update(event_id, payload.model_dump(exclude_unset=True))
    return {"events": manager.events}


@router.delete("/events/{event_id}", response_model=CatalogOut)
def delete_event(
    event_id: int,
    confirm: bool = False,
    _: AuthContext = Depends(require_admin),
    manager: AdminCatalogManager = Depends(get_catalog_manager),
):
    manager.delete(event_id, confirm=confirm)
    return {"events": manager.events}


@router.post("/events/{event_id}/reconcile", response_model=ReconcileOut)
def reconcile_event(
    event_id: int,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return reconcile_event_capacity(db, event_id)


@router.post("/reconcile", response_model=TaskQueuedOut, status_code=status.HTTP_202_ACCEPTED)
def reconcile_all(_: AuthContext = Depends(require_admin)):
    # enqueue durable background work to repair capacity drift
    try:
        result = reconcile_all_events_task.delay()
    except OperationalError as exc:
        raise BackendUnavailableError("Could not queue the reconcile job, please try again") from exc
    return {"task_id": result.id, "status": "queued"}
