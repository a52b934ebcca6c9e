from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pune_events.core import config
from pune_events.core.locks import EventBusyError
from pune_events.database.db import get_db
from pune_events.dependencies import get_optional_user_id, require_manager
from pune_events.models.events import EventCategory
from pune_events.schemas.events import EventCreate, EventOut, EventUpdate, MessageOut
from pune_events.services import events as event_service
from pune_events.services.events import (
    CapacityBelowAttendeesError,
    EventNotFoundError,
    NotEventOwnerError,
)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def browse_events(
    category: Optional[EventCategory] = None,
    city: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return event_service.list_published_events(db, category=category, city=city, limit=limit)


@router.get("/featured", response_model=list[EventOut])
def featured_events(db: Session = Depends(get_db)):
    return event_service.list_published_events(db, limit=config.FEATURED_EVENTS_LIMIT)


@router.get("/{event_id}", response_model=EventOut)
def event_detail(
    event_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        return event_service.get_visible_event(db, event_id, viewer_id=user_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    return event_service.create_event(db, payload, manager_id=manager_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    try:
        return event_service.update_event(db, event_id, payload, manager_id=manager_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NotEventOwnerError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except (CapacityBelowAttendeesError, EventBusyError) as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    try:
        event_service.delete_event(db, event_id, manager_id=manager_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NotEventOwnerError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except EventBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"message": "Event deleted successfully"}
