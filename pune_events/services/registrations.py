import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from pune_events.core.locks import event_lock
from pune_events.core.redis_config import get_redis_client
from pune_events.models.events import Event
from pune_events.models.registrations import Registration
from pune_events.services.events import EventNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CapacityExceededError(Exception):
    pass


class AlreadyRegisteredError(Exception):
    pass


class NotRegisteredError(Exception):
    pass


def _run_in_transaction(db: Session, fn: Callable[..., T], *args) -> T:
    # Check if we're already in a transaction (request dependencies, tests)
    if db.in_transaction():
        try:
            result = fn(db, *args)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return result
    with db.begin():
        return fn(db, *args)


def get_registration(db: Session, event_id: int, user_id: int) -> Optional[Registration]:
    return db.scalar(
        select(Registration).where(
            Registration.event_id == event_id,
            Registration.user_id == user_id,
        )
    )


def register_for_event(db: Session, *, event_id: int, user_id: int) -> Registration:
    """
    Register a user for a published event.

    The capacity check, the counter increment and the registration insert
    happen in one transaction under the event lock: either both rows change
    or neither does, and the counter can never pass max_attendees.
    """
    with event_lock(get_redis_client(), event_id):
        registration = _run_in_transaction(db, _register_in_transaction, event_id, user_id)
    db.refresh(registration)
    logger.info("User %s registered for event %s", user_id, event_id)
    return registration


def _register_in_transaction(db: Session, event_id: int, user_id: int) -> Registration:
    if get_registration(db, event_id, user_id) is not None:
        raise AlreadyRegisteredError("Already registered for this event")

    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.is_published.is_(True))
        .where(or_(Event.max_attendees.is_(None), Event.current_attendees < Event.max_attendees))
        .values(current_attendees=Event.current_attendees + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        event = db.get(Event, event_id)
        if event is None or not event.is_published:
            raise EventNotFoundError("Event not found")
        raise CapacityExceededError("Event is full")

    registration = Registration(event_id=event_id, user_id=user_id)
    db.add(registration)
    try:
        db.flush()  # gets registration.id, enforces the (event, user) constraint
    except IntegrityError:
        raise AlreadyRegisteredError("Already registered for this event")
    return registration


def unregister_from_event(db: Session, *, event_id: int, user_id: int) -> None:
    """Cancel a registration and release its spot; fails if there is nothing to cancel."""
    with event_lock(get_redis_client(), event_id):
        _run_in_transaction(db, _unregister_in_transaction, event_id, user_id)
    logger.info("User %s cancelled registration for event %s", user_id, event_id)


def _unregister_in_transaction(db: Session, event_id: int, user_id: int) -> None:
    res = db.execute(
        delete(Registration)
        .where(
            Registration.event_id == event_id,
            Registration.user_id == user_id,
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:  # type: ignore
        raise NotRegisteredError("Registration not found")

    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(
            current_attendees=case(
                (Event.current_attendees > 0, Event.current_attendees - 1),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )


def get_registration_status(db: Session, *, event: Event, user_id: int) -> dict:
    registered = get_registration(db, event.id, user_id) is not None
    return {
        "event_id": event.id,
        "registered": registered,
        "spots_left": event.spots_left,
        "is_full": event.is_full,
        "can_register": event.is_published and not event.is_full and not registered,
    }


def list_user_registrations(db: Session, user_id: int) -> list[Registration]:
    stmt = (
        select(Registration)
        .options(selectinload(Registration.event))
        .where(Registration.user_id == user_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def count_registrations(db: Session, event_id: int) -> int:
    count = db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id))
    return int(count or 0)


def reconcile_attendee_count(db: Session, event_id: int) -> Optional[dict]:
    """
    Recompute the cached attendee counter from the registration rows.

    Runs under the event lock like register and unregister: a registration
    committing between the count and the write would otherwise be lost
    from the counter and let the event overfill.
    """
    with event_lock(get_redis_client(), event_id):
        return _run_in_transaction(db, _reconcile_in_transaction, event_id)


def _reconcile_in_transaction(db: Session, event_id: int) -> Optional[dict]:
    event = db.scalar(
        select(Event)
        .where(Event.id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if event is None:
        return None

    actual = count_registrations(db, event_id)
    drift = event.current_attendees - actual
    if drift:
        logger.warning(
            "Event %s attendee counter drifted by %+d (counter=%s, registrations=%s); correcting",
            event_id, drift, event.current_attendees, actual,
        )
        event.current_attendees = actual
    return {"event_id": event_id, "current_attendees": actual, "corrected": drift != 0}
