from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pune_events.database.db import get_db
from pune_events.dependencies import get_current_user_id, require_manager
from pune_events.schemas.dashboard import DashboardOut
from pune_events.schemas.events import EventOut
from pune_events.services.accounts import RoleNotFoundError
from pune_events.services.dashboard import build_dashboard
from pune_events.services.events import list_owned_events

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    try:
        return build_dashboard(db, user_id)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/me/events", response_model=list[EventOut])
def my_events(
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    return list_owned_events(db, manager_id)
