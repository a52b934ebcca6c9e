from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pune_events.database.db import get_db
from pune_events.dependencies import require_manager
from pune_events.schemas.reports import EventStatsOut, ReportOut
from pune_events.services.events import EventNotFoundError, NotEventOwnerError
from pune_events.services.reports import get_event_stats, get_manager_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportOut)
def manager_report(
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    """Aggregate report across the manager's events."""
    return get_manager_report(db, manager_id)


@router.get("/events/{event_id}", response_model=EventStatsOut)
def event_report(
    event_id: int,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    try:
        return get_event_stats(db, event_id, manager_id=manager_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NotEventOwnerError as e:
        raise HTTPException(status_code=403, detail=str(e))
