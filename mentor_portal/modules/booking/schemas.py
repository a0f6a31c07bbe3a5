"""Booking schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mentor_portal.core.enums import SessionTabEnum, SessionTypeEnum, TimeWindowEnum


class SessionUIStateRead(BaseModel):
    """Join/cancel/reschedule availability for one session."""

    model_config = ConfigDict(from_attributes=True)

    join_enabled: bool
    join_label: str
    cancel_allowed: bool
    reschedule_allowed: bool


class SessionRead(BaseModel):
    """Booking decorated with its time window and UI state.

    ``window`` and ``ui_state`` are None when the stored slot strings could
    not be parsed; ``date`` and ``time`` then carry the raw values.
    """

    id: str
    status: str
    date: str
    time: str
    session_type: Any = None
    mode: str | None = None
    agenda: str | None = None
    mentor: Any = None
    student: Any = None
    zoom_join_url: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    window: TimeWindowEnum | None = None
    ui_state: SessionUIStateRead | None = None


class SessionListRead(BaseModel):
    """Schedule page view model."""

    tab: SessionTabEnum
    items: list[SessionRead]
    total: int


class StudentBookingPageRead(SessionListRead):
    max_bookings: int
    booking_limit_reached: bool


class BookingCreate(BaseModel):
    """Book an open slot with a host."""

    mentor_id: str = Field(min_length=1)
    session_type: SessionTypeEnum
    mode: str = Field(min_length=1, max_length=64)
    slot_id: str = Field(min_length=1)
    date: str
    time: str
    agenda: str = Field(default="", max_length=2000)


class BookingRescheduleRequest(BaseModel):
    """Proposed replacement date and time range."""

    date: str
    time: str


class SessionResponseRequest(BaseModel):
    """Mentor reply to a pending request."""

    response: str = Field(min_length=1, max_length=64)


class HostRead(BaseModel):
    """Mentor or EC a student can book with."""

    id: str
    name: str = ""
    email: str = ""
    roles: list[str] = Field(default_factory=list)


class OpenSlotRead(BaseModel):
    id: str
    date: str
    time: str
    status: str | None = None


class CalendarDayRead(BaseModel):
    day: str
    date: str
    iso: str


class OpenSlotsRead(BaseModel):
    """Open slots grouped by date, soonest first, plus the date strip."""

    mentor_id: str
    calendar: list[CalendarDayRead]
    days: dict[str, list[OpenSlotRead]]
