from typing import Callable

from sqlalchemy.orm import Session

from pune_events.models.users import Role
from pune_events.services.accounts import get_user_role
from pune_events.services.events import list_owned_events
from pune_events.services.registrations import list_user_registrations


def attendee_dashboard(db: Session, user_id: int) -> dict:
    return {"role": Role.ATTENDEE, "registrations": list_user_registrations(db, user_id)}


def manager_dashboard(db: Session, user_id: int) -> dict:
    return {"role": Role.EVENT_MANAGER, "events": list_owned_events(db, user_id)}


DASHBOARD_BUILDERS: dict[Role, Callable[[Session, int], dict]] = {
    Role.ATTENDEE: attendee_dashboard,
    Role.EVENT_MANAGER: manager_dashboard,
}


def build_dashboard(db: Session, user_id: int) -> dict:
    role = get_user_role(db, user_id)
    return DASHBOARD_BUILDERS[role](db, user_id)
