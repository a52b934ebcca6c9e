import logging

from pune_events.core.celery_config import celery_app
from pune_events.core.locks import EventBusyError
from pune_events.database.db import SessionLocal
from pune_events.services.registrations import reconcile_attendee_count

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, autoretry_for=(EventBusyError,), retry_backoff=True, max_retries=3)
def reconcile_attendees_task(self, event_id: int):
    """Bring the event's attendee counter back in line with its registration rows."""
    db = SessionLocal()
    try:
        return reconcile_attendee_count(db, event_id)
    finally:
        db.close()


def enqueue_reconcile(event_id: int) -> None:
    # best effort: a missing broker must not fail the registration itself
    try:
        reconcile_attendees_task.delay(event_id)
    except Exception:
        logger.warning("Could not enqueue attendee reconciliation for event %s", event_id, exc_info=True)
