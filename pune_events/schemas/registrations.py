from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from pune_events.schemas.events import EventOut


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    registered_at: datetime

    class Config:
        from_attributes = True


class RegistrationWithEventOut(RegistrationOut):
    event: EventOut


class RegistrationStatusOut(BaseModel):
    event_id: int
    registered: bool
    spots_left: Optional[int]
    is_full: bool
    can_register: bool
