from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from pune_events.models.events import EventCategory


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20)
    category: EventCategory = EventCategory.CULTURAL
    venue: str = Field(min_length=1, max_length=255)
    city: str = Field(default="Pune", min_length=1, max_length=120)
    event_date: datetime
    max_attendees: Optional[int] = Field(default=None, ge=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(default=None, max_length=500)
    is_published: bool = False

    class Config:
        str_strip_whitespace = True


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20)
    category: Optional[EventCategory] = None
    venue: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=120)
    event_date: Optional[datetime] = None
    max_attendees: Optional[int] = Field(default=None, ge=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(default=None, max_length=500)
    is_published: Optional[bool] = None

    class Config:
        str_strip_whitespace = True


class EventOut(BaseModel):
    id: int
    title: str
    description: str
    category: EventCategory
    venue: str
    city: str
    event_date: datetime
    max_attendees: Optional[int]
    current_attendees: int
    spots_left: Optional[int]
    is_full: bool
    price: Decimal
    image_url: Optional[str]
    is_published: bool
    manager_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class HomeOut(BaseModel):
    signed_in: bool
    featured_events: list[EventOut]


class MessageOut(BaseModel):
    message: str
