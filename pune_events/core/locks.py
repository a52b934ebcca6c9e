import logging
from contextlib import contextmanager

import redis

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10
LOCK_BLOCKING_TIMEOUT_SECONDS = 5


class EventBusyError(Exception):
    pass


@contextmanager
def event_lock(redis_client: redis.Redis, event_id: int):
    """
    Hold the per-event Redis lock.

    Every write that touches an event's attendee counter or its capacity
    (register, unregister, reconcile, update, delete) runs inside this
    block, so those writes never interleave for the same event.
    """
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=LOCK_TIMEOUT_SECONDS,
        blocking_timeout=LOCK_BLOCKING_TIMEOUT_SECONDS,
    )
    try:
        acquired = lock.acquire(blocking=True, blocking_timeout=LOCK_BLOCKING_TIMEOUT_SECONDS)
    except redis.exceptions.LockError:
        acquired = False
    if not acquired:
        raise EventBusyError("Event is busy, please try again.")

    try:
        yield lock
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            logger.warning("Lock for event %s expired before it was released", event_id)
