import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pune_events.database.db import Base
from pune_events.models.registrations import Registration


class EventCategory(str, enum.Enum):
    CULTURAL = "cultural"
    TECH = "tech"
    SPORTS = "sports"
    BUSINESS = "business"
    MUSIC = "music"
    FOOD = "food"
    EDUCATION = "education"
    HEALTH = "health"
    OTHER = "other"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("current_attendees >= 0", name="ck_events_attendees_non_negative"),
        CheckConstraint(
            "max_attendees IS NULL OR current_attendees <= max_attendees",
            name="ck_events_attendees_within_capacity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default=EventCategory.CULTURAL.value)
    venue: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, default="Pune")
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    max_attendees: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_attendees: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    manager_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    registrations: Mapped[list[Registration]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    @property
    def spots_left(self) -> Optional[int]:
        if self.max_attendees is None:
            return None
        return max(self.max_attendees - (self.current_attendees or 0), 0)

    @property
    def is_full(self) -> bool:
        return self.spots_left is not None and self.spots_left <= 0

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title!r}, attendees={self.current_attendees}/{self.max_attendees})>"
