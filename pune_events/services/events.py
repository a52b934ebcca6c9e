import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pune_events.core.locks import event_lock
from pune_events.core.redis_config import get_redis_client
from pune_events.models.events import Event, EventCategory
from pune_events.schemas.events import EventCreate, EventUpdate

logger = logging.getLogger(__name__)

# columns an update may set back to NULL
NULLABLE_FIELDS = {"max_attendees", "image_url"}


class EventNotFoundError(Exception):
    pass


class NotEventOwnerError(Exception):
    pass


class CapacityBelowAttendeesError(Exception):
    pass


def create_event(db: Session, payload: EventCreate, *, manager_id: int) -> Event:
    data = payload.model_dump()
    data["category"] = payload.category.value
    if data["price"] is None:
        data["price"] = Decimal("0")
    event = Event(**data, manager_id=manager_id, current_attendees=0)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created by manager %s", event.id, manager_id)
    return event


def get_event(db: Session, event_id: int) -> Optional[Event]:
    return db.get(Event, event_id)


def get_visible_event(db: Session, event_id: int, viewer_id: Optional[int] = None) -> Event:
    """Published events are public; drafts are visible to their owner only."""
    event = get_event(db, event_id)
    if event is None or (not event.is_published and event.manager_id != viewer_id):
        raise EventNotFoundError("Event not found")
    return event


def get_owned_event(db: Session, event_id: int, manager_id: int) -> Event:
    event = get_event(db, event_id)
    if event is None:
        raise EventNotFoundError("Event not found")
    if event.manager_id != manager_id:
        raise NotEventOwnerError("Not authorized to modify this event")
    return event


def list_published_events(
    db: Session,
    *,
    category: Optional[EventCategory] = None,
    city: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Event]:
    stmt = select(Event).where(Event.is_published.is_(True))
    if category is not None:
        stmt = stmt.where(Event.category == category.value)
    if city:
        stmt = stmt.where(Event.city.ilike(city))
    stmt = stmt.order_by(Event.event_date.asc(), Event.id.asc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))


def list_owned_events(db: Session, manager_id: int) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.manager_id == manager_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return list(db.scalars(stmt))


def update_event(db: Session, event_id: int, payload: EventUpdate, *, manager_id: int) -> Event:
    """
    Apply a partial update to an owned event.

    The capacity check and the write happen under the event lock, so no
    registration can commit between reading ``current_attendees`` and
    lowering ``max_attendees``.
    """
    changes = payload.model_dump(exclude_unset=True)
    if "price" in changes and changes["price"] is None:
        changes["price"] = Decimal("0")
    changes = {
        field: value
        for field, value in changes.items()
        if value is not None or field in NULLABLE_FIELDS
    }
    if isinstance(changes.get("category"), EventCategory):
        changes["category"] = changes["category"].value

    with event_lock(get_redis_client(), event_id):
        event = get_owned_event(db, event_id, manager_id)
        db.refresh(event)

        new_max = changes.get("max_attendees", event.max_attendees)
        if new_max is not None and new_max < event.current_attendees:
            raise CapacityBelowAttendeesError(
                f"Max attendees cannot be lower than the {event.current_attendees} current registrations"
            )

        for field, value in changes.items():
            setattr(event, field, value)

        try:
            db.commit()
        except IntegrityError:
            # the capacity check constraint caught a write that bypassed the lock
            db.rollback()
            raise CapacityBelowAttendeesError("Max attendees cannot be lower than the current registrations")

    db.refresh(event)
    logger.info("Event %s updated by manager %s (%s)", event_id, manager_id, ", ".join(sorted(changes)))
    return event


def delete_event(db: Session, event_id: int, *, manager_id: int) -> None:
    with event_lock(get_redis_client(), event_id):
        event = get_owned_event(db, event_id, manager_id)
        # registrations go with the event (relationship cascade)
        db.delete(event)
        db.commit()
    logger.info("Event %s deleted by manager %s", event_id, manager_id)
