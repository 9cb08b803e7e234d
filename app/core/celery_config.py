from celery import Celery

from app.core.config import RECONCILE_INTERVAL_SECONDS, get_redis_url


def make_celery(app_name: str = "event_booking") -> Celery:
    redis_url = get_redis_url()
    celery = Celery(app_name, broker=redis_url, backend=redis_url, include=["app.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.worker_hijack_root_logger = False
    celery.conf.beat_schedule = {
        "reconcile-event-capacity": {
            "task": "app.tasks.reconcile_all_events_task",
            "schedule": RECONCILE_INTERVAL_SECONDS,
        }
    }
    return celery


celery_app = make_celery()
