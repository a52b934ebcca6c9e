from typing import Optional

from pydantic import BaseModel


class EventStatsOut(BaseModel):
    event_id: int
    max_attendees: Optional[int]
    current_attendees: int
    registration_count: int
    spots_left: Optional[int]
    in_sync: bool


class ReportOut(BaseModel):
    total_events: int
    published_events: int
    total_capacity: int
    total_attendees: int
