from celery import Celery

from pune_events.core import config
from pune_events.core.redis_config import get_redis_url

RECONCILE_TASK = "pune_events.tasks.reconcile_attendees_task"


def make_celery(app_name: str = "pune_events") -> Celery:
    redis_url = get_redis_url()
    celery = Celery(
        app_name,
        broker=config.CELERY_BROKER_URL or redis_url,
        backend=config.CELERY_RESULT_BACKEND or redis_url,
        include=["pune_events.tasks"],
    )
    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        result_expires=3600,
        task_track_started=True,
        # redeliver if a worker dies mid-reconcile
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,
        task_routes={RECONCILE_TASK: {"queue": config.RECONCILE_QUEUE}},
    )
    return celery


celery_app = make_celery()
