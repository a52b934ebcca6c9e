from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from pune_events.models.users import Role
from pune_events.schemas.events import EventOut
from pune_events.schemas.registrations import RegistrationWithEventOut


class AttendeeDashboardOut(BaseModel):
    role: Literal[Role.ATTENDEE]
    registrations: list[RegistrationWithEventOut]


class ManagerDashboardOut(BaseModel):
    role: Literal[Role.EVENT_MANAGER]
    events: list[EventOut]


DashboardOut = Annotated[Union[AttendeeDashboardOut, ManagerDashboardOut], Field(discriminator="role")]
