"""Scheduling schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mentor_portal.core.enums import SlotStatusEnum
from mentor_portal.modules.scheduling.slots import WEEKDAY_ABBREVIATIONS, parse_24h_time
from mentor_portal.shared.exceptions import ParseError


class TimeRangeWindow(BaseModel):
    """24-hour ``HH:MM`` bounds as sent by time inputs."""

    start: str
    end: str

    @model_validator(mode="after")
    def validate_order(self) -> TimeRangeWindow:
        try:
            start = parse_24h_time(self.start, field="start")
            end = parse_24h_time(self.end, field="end")
        except ParseError as exc:
            raise ValueError(exc.message) from exc
        if start >= end:
            raise ValueError("start must be before end")
        return self


class SessionPolicy(BaseModel):
    """Admin-managed defaults for slot authoring."""

    model_config = ConfigDict(populate_by_name=True)

    session_duration: int = Field(default=30, alias="sessionDuration", gt=0, le=480)
    max_slots_per_day: int = Field(default=4, alias="maxSlotsPerDay", gt=0, le=48)
    available_days: list[str] = Field(
        default_factory=lambda: ["Mon", "Tue", "Wed", "Thu", "Fri"],
        alias="availableDays",
    )
    time_range: TimeRangeWindow = Field(
        default_factory=lambda: TimeRangeWindow(start="09:00", end="18:00"),
        alias="timeRange",
    )
    buffer_time: int = Field(default=15, alias="bufferTime", ge=0, le=240)

    @field_validator("available_days")
    @classmethod
    def normalize_days(cls, value: list[str]) -> list[str]:
        days = []
        for item in value:
            day = str(item).strip()[:3].title()
            if day not in WEEKDAY_ABBREVIATIONS:
                raise ValueError(f"Unknown weekday: {item}")
            if day not in days:
                days.append(day)
        return days


DEFAULT_SESSION_POLICY = SessionPolicy()


class SlotPreviewItem(BaseModel):
    display: str
    start: str
    end: str


class SlotPreviewRead(BaseModel):
    """Candidate slots for one working range."""

    start_time: str
    end_time: str
    slot_duration: int
    buffer: int
    slots: list[SlotPreviewItem]


class DaySlotsCreate(BaseModel):
    day: str
    slots: list[TimeRangeWindow] = Field(min_length=1)

    @field_validator("day")
    @classmethod
    def normalize_day(cls, value: str) -> str:
        day = value.strip()[:3].title()
        if day not in WEEKDAY_ABBREVIATIONS:
            raise ValueError(f"Unknown weekday: {value}")
        return day


class SlotsCreateRequest(BaseModel):
    """Availability for the selected weekdays of the coming week."""

    days: list[DaySlotsCreate] = Field(min_length=1)


class MentorSlotRead(BaseModel):
    id: str
    date: str
    time: str
    start_time: str | None = None
    end_time: str | None = None
    status: str | None = None


class MentorSlotsRead(BaseModel):
    """Mentor slots for one status tab, grouped by date."""

    status: SlotStatusEnum
    week: list[dict[str, str]]
    days: dict[str, list[MentorSlotRead]]
    total: int


class SlotsCreatedRead(BaseModel):
    created: int
    dates: list[str]
