from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pune_events.models.events import Event
from pune_events.services.events import get_owned_event
from pune_events.services.registrations import count_registrations


def get_event_stats(db: Session, event_id: int, *, manager_id: int) -> dict:
    event = get_owned_event(db, event_id, manager_id)
    registration_count = count_registrations(db, event_id)

    return {
        "event_id": event.id,
        "max_attendees": event.max_attendees,
        "current_attendees": event.current_attendees,
        "registration_count": registration_count,
        "spots_left": event.spots_left,
        "in_sync": event.current_attendees == registration_count,
    }


def get_manager_report(db: Session, manager_id: int) -> dict:
    """Return aggregated totals across a manager's events."""
    owned = Event.manager_id == manager_id

    total_events = db.scalar(select(func.count(Event.id)).where(owned))
    published_events = db.scalar(select(func.count(Event.id)).where(owned, Event.is_published.is_(True)))
    total_capacity = db.scalar(select(func.sum(Event.max_attendees)).where(owned))
    total_attendees = db.scalar(select(func.sum(Event.current_attendees)).where(owned))

    return {
        "total_events": int(total_events or 0),
        "published_events": int(published_events or 0),
        "total_capacity": int(total_capacity or 0),
        "total_attendees": int(total_attendees or 0),
    }
