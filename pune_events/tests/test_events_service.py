"""
Test event management and listing services.
"""
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from pune_events.models.events import EventCategory
from pune_events.models.users import Role
from pune_events.schemas.events import EventCreate, EventUpdate
from pune_events.services.events import (
    CapacityBelowAttendeesError,
    EventNotFoundError,
    NotEventOwnerError,
    create_event,
    delete_event,
    get_event,
    get_owned_event,
    get_visible_event,
    list_owned_events,
    list_published_events,
    update_event,
)
from pune_events.services.registrations import register_for_event


def event_payload(**overrides) -> EventCreate:
    data = {
        "title": "Koregaon Park Food Walk",
        "description": "Taste your way through the best street food in town.",
        "category": EventCategory.FOOD,
        "venue": "North Main Road",
        "event_date": datetime(2026, 11, 5, 17, 30),
        "max_attendees": 30,
    }
    data.update(overrides)
    return EventCreate(**data)


class TestCreateEvent:
    def test_create_event(self, db_session: Session, manager):
        event = create_event(db_session, event_payload(), manager_id=manager.id)

        assert event.id is not None
        assert event.manager_id == manager.id
        assert event.current_attendees == 0
        assert event.category == "food"
        assert event.city == "Pune"
        assert event.price == Decimal("0")
        assert event.is_published is False

    def test_create_event_with_price(self, db_session: Session, manager):
        event = create_event(db_session, event_payload(price=Decimal("99.50")), manager_id=manager.id)

        assert event.price == Decimal("99.50")


class TestEventLookup:
    def test_get_event_missing(self, db_session: Session):
        assert get_event(db_session, 99999) is None

    def test_visible_event(self, db_session: Session, make_event, manager, attendee):
        published = make_event()
        draft = make_event(is_published=False)

        assert get_visible_event(db_session, published.id).id == published.id
        assert get_visible_event(db_session, draft.id, viewer_id=manager.id).id == draft.id
        with pytest.raises(EventNotFoundError):
            get_visible_event(db_session, draft.id, viewer_id=attendee.id)
        with pytest.raises(EventNotFoundError):
            get_visible_event(db_session, draft.id)

    def test_owned_event(self, db_session: Session, make_event, make_user):
        event = make_event()
        other = make_user(Role.EVENT_MANAGER)

        with pytest.raises(NotEventOwnerError):
            get_owned_event(db_session, event.id, other.id)
        with pytest.raises(EventNotFoundError):
            get_owned_event(db_session, 99999, other.id)


class TestListings:
    def test_published_only_sorted_by_date(self, db_session: Session, make_event):
        make_event(title="Third", days_ahead=3)
        make_event(title="First", days_ahead=1)
        make_event(title="Hidden", is_published=False)
        make_event(title="Second", days_ahead=2)

        events = list_published_events(db_session)

        assert [e.title for e in events] == ["First", "Second", "Third"]

    def test_filters_and_limit(self, db_session: Session, make_event):
        make_event(title="Pune Tech", category="tech", days_ahead=1)
        make_event(title="Pune Music", category="music", days_ahead=2)
        make_event(title="Mumbai Tech", category="tech", city="Mumbai", days_ahead=3)

        tech = list_published_events(db_session, category=EventCategory.TECH)
        assert [e.title for e in tech] == ["Pune Tech", "Mumbai Tech"]

        mumbai = list_published_events(db_session, city="MUMBAI")
        assert [e.title for e in mumbai] == ["Mumbai Tech"]

        assert len(list_published_events(db_session, limit=2)) == 2

    def test_owned_events_include_drafts(self, db_session: Session, make_event, make_user):
        first = make_event(title="Older")
        second = make_event(title="Newer", is_published=False)
        make_user(Role.EVENT_MANAGER)

        owned = list_owned_events(db_session, first.manager_id)

        assert {e.id for e in owned} == {first.id, second.id}
        assert list_owned_events(db_session, 99999) == []


class TestUpdateEvent:
    def test_partial_update(self, db_session: Session, make_event, manager):
        event = make_event(max_attendees=10)

        updated = update_event(
            db_session,
            event.id,
            EventUpdate(title="Updated Meetup", category=EventCategory.BUSINESS),
            manager_id=manager.id,
        )

        assert updated.title == "Updated Meetup"
        assert updated.category == "business"
        assert updated.max_attendees == 10
        assert updated.venue == "Hinjewadi Hall"

    def test_clear_capacity(self, db_session: Session, make_event, manager):
        event = make_event(max_attendees=10, current_attendees=10)

        updated = update_event(db_session, event.id, EventUpdate(max_attendees=None), manager_id=manager.id)

        assert updated.max_attendees is None
        assert updated.is_full is False

    def test_capacity_below_attendees(self, db_session: Session, make_event, manager):
        event = make_event(max_attendees=10, current_attendees=6)

        with pytest.raises(CapacityBelowAttendeesError):
            update_event(db_session, event.id, EventUpdate(max_attendees=5), manager_id=manager.id)

        db_session.refresh(event)
        assert event.max_attendees == 10

    def test_registration_after_event_loaded(self, db_session: Session, session_factory, make_event, make_user, manager):
        event = make_event(max_attendees=3)
        register_for_event(db_session, event_id=event.id, user_id=make_user().id)
        db_session.refresh(event)
        assert event.current_attendees == 1

        # another request registers after this session loaded the event
        other = session_factory()
        try:
            register_for_event(other, event_id=event.id, user_id=make_user().id)
        finally:
            other.close()

        with pytest.raises(CapacityBelowAttendeesError):
            update_event(db_session, event.id, EventUpdate(max_attendees=1), manager_id=manager.id)

        db_session.refresh(event)
        assert event.max_attendees == 3
        assert event.current_attendees == 2

    def test_capacity_equal_to_attendees(self, db_session: Session, make_event, manager):
        event = make_event(max_attendees=10, current_attendees=6)

        updated = update_event(db_session, event.id, EventUpdate(max_attendees=6), manager_id=manager.id)

        assert updated.is_full is True

    def test_not_owner(self, db_session: Session, make_event, make_user):
        event = make_event()
        other = make_user(Role.EVENT_MANAGER)

        with pytest.raises(NotEventOwnerError):
            update_event(db_session, event.id, EventUpdate(title="Someone Else"), manager_id=other.id)


class TestDeleteEvent:
    def test_delete(self, db_session: Session, make_event, manager):
        event = make_event()
        event_id = event.id

        delete_event(db_session, event_id, manager_id=manager.id)

        assert get_event(db_session, event_id) is None

    def test_delete_not_owner(self, db_session: Session, make_event, make_user):
        event = make_event()
        other = make_user(Role.EVENT_MANAGER)

        with pytest.raises(NotEventOwnerError):
            delete_event(db_session, event.id, manager_id=other.id)
