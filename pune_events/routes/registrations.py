from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pune_events import tasks
from pune_events.core.locks import EventBusyError
from pune_events.database.db import get_db
from pune_events.dependencies import get_current_user_id
from pune_events.schemas.events import MessageOut
from pune_events.schemas.registrations import (
    RegistrationOut,
    RegistrationStatusOut,
    RegistrationWithEventOut,
)
from pune_events.services.events import EventNotFoundError, get_visible_event
from pune_events.services.registrations import (
    AlreadyRegisteredError,
    CapacityExceededError,
    NotRegisteredError,
    get_registration_status,
    list_user_registrations,
    register_for_event,
    unregister_from_event,
)

router = APIRouter(tags=["registrations"])


@router.post(
    "/events/{event_id}/register",
    response_model=RegistrationOut,
    status_code=status.HTTP_201_CREATED,
)
def register(
    event_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    try:
        registration = register_for_event(db, event_id=event_id, user_id=user_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CapacityExceededError, AlreadyRegisteredError, EventBusyError) as e:
        raise HTTPException(status_code=409, detail=str(e))

    tasks.enqueue_reconcile(event_id)
    return registration


@router.delete("/events/{event_id}/register", response_model=MessageOut)
def unregister(
    event_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    try:
        unregister_from_event(db, event_id=event_id, user_id=user_id)
    except NotRegisteredError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    tasks.enqueue_reconcile(event_id)
    return {"message": "Registration cancelled"}


@router.get("/events/{event_id}/registration", response_model=RegistrationStatusOut)
def registration_status(
    event_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    try:
        event = get_visible_event(db, event_id, viewer_id=user_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return get_registration_status(db, event=event, user_id=user_id)


@router.get("/me/registrations", response_model=list[RegistrationWithEventOut])
def my_registrations(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return list_user_registrations(db, user_id)
