"""Slot and session time model.

Slots are stored by the backend as a ``dd-mm-yyyy`` date plus a 12-hour range
such as ``"9:00 AM - 9:30 AM"``. Everything the pages need to know about a
session's timing (is it upcoming, running or over; which buttons are live) is
derived here from those two strings. All comparisons are made on absolute
instants so a session late on one day never compares against a time-of-day on
another.

Every function is pure. Malformed input raises ``ParseError``; nothing is ever
silently coerced to "now" or to the epoch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from mentor_portal.core.enums import BookingStatusEnum, TimeWindowEnum
from mentor_portal.shared.exceptions import ParseError

_DATE_RE = re.compile(r"^\s*(\d{1,2})-(\d{1,2})-(\d{4})\s*$")
_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_RANGE_SEPARATOR_RE = re.compile(r"\s+-\s+|\s*-\s*(?=\d)")

MINUTES_PER_DAY = 24 * 60

_ACTIVE_STATUSES = frozenset(
    {
        BookingStatusEnum.BOOKED,
        BookingStatusEnum.IN_PROGRESS,
        BookingStatusEnum.RESCHEDULED,
    },
)
_AWAITING_STATUSES = frozenset(
    {
        BookingStatusEnum.CANCELLATION_REQUESTED,
        BookingStatusEnum.RESCHEDULE_REQUESTED,
    },
)


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Start and end offsets in minutes from local midnight."""

    start_minutes: int
    end_minutes: int

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True, slots=True)
class SessionWindow:
    """Absolute start and end instants of a session."""

    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class SessionUIState:
    """Which session actions a page may offer right now."""

    join_enabled: bool
    join_label: str
    cancel_allowed: bool
    reschedule_allowed: bool


def parse_date(value: str, tz: tzinfo | None = None) -> datetime:
    """Parse ``dd-mm-yyyy`` into local midnight of that day.

    Day and month may be zero-padded or not. When ``tz`` is given the result
    is aware in that zone, otherwise it is naive.
    """
    if not isinstance(value, str):
        raise ParseError("date", value, "expected a dd-mm-yyyy string")
    match = _DATE_RE.match(value)
    if match is None:
        raise ParseError("date", value, "expected dd-mm-yyyy")
    day, month, year = (int(part) for part in match.groups())
    try:
        midnight = datetime(year, month, day)
    except ValueError as exc:
        raise ParseError("date", value, str(exc)) from exc
    if tz is not None:
        midnight = midnight.replace(tzinfo=tz)
    return midnight


def parse_clock_time(value: str, field: str = "time") -> int:
    """Parse ``h:mm AM/PM`` into minutes from midnight.

    12 AM is midnight, 12 PM stays noon, other PM hours gain twelve. ``0:MM AM``
    is tolerated as midnight.
    """
    if not isinstance(value, str):
        raise ParseError(field, value, "expected an h:mm AM/PM string")
    match = _CLOCK_RE.match(value)
    if match is None:
        raise ParseError(field, value, "expected h:mm AM/PM")
    hour = int(match.group(1))
    minute = int(match.group(2))
    meridian = match.group(3).upper()

    if minute > 59:
        raise ParseError(field, value, "minutes must be between 00 and 59")
    if hour > 12 or (hour == 0 and meridian == "PM"):
        raise ParseError(field, value, "hour must be between 1 and 12")

    if meridian == "AM" and hour == 12:
        hour = 0
    elif meridian == "PM" and hour != 12:
        hour += 12
    return hour * 60 + minute


def parse_time_range(value: str) -> TimeRange:
    """Parse ``"h:mm AM/PM - h:mm AM/PM"`` into minute offsets.

    A range whose end precedes its start would cross midnight; it is rejected
    because a slot carries a single date.
    """
    if not isinstance(value, str):
        raise ParseError("time", value, "expected an h:mm AM/PM - h:mm AM/PM string")
    parts = _RANGE_SEPARATOR_RE.split(value.strip(), maxsplit=1)
    if len(parts) != 2:
        raise ParseError("time", value, "expected h:mm AM/PM - h:mm AM/PM")
    start = parse_clock_time(parts[0], field="time")
    end = parse_clock_time(parts[1], field="time")
    if end < start:
        raise ParseError("time", value, "end precedes start (ranges cannot cross midnight)")
    return TimeRange(start_minutes=start, end_minutes=end)


def format_clock_time(minutes: int) -> str:
    """Render minutes from midnight as ``h:mm AM/PM``."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    hour, minute = divmod(minutes, 60)
    meridian = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {meridian}"


def format_time_range(time_range: TimeRange) -> str:
    return f"{format_clock_time(time_range.start_minutes)} - {format_clock_time(time_range.end_minutes)}"


def format_date(value: date) -> str:
    """Render a date as zero-padded ``dd-mm-yyyy``."""
    return f"{value.day:02d}-{value.month:02d}-{value.year:04d}"


def session_window(date_value: str, time_value: str, tz: tzinfo | None = None) -> SessionWindow:
    """Combine a slot date and time range into absolute instants."""
    midnight = parse_date(date_value, tz)
    time_range = parse_time_range(time_value)
    return SessionWindow(
        start=midnight + timedelta(minutes=time_range.start_minutes),
        end=midnight + timedelta(minutes=time_range.end_minutes),
    )


def classify_window(start: datetime, end: datetime, now: datetime) -> TimeWindowEnum:
    """Place ``now`` before, inside or after ``[start, end]``."""
    if now < start:
        return TimeWindowEnum.UPCOMING
    if now > end:
        return TimeWindowEnum.PAST
    return TimeWindowEnum.ONGOING


def derive_ui_state(status: BookingStatusEnum, window: TimeWindowEnum) -> SessionUIState:
    """Decide join/cancel/reschedule availability for a booking."""
    if status in _ACTIVE_STATUSES:
        if window == TimeWindowEnum.ONGOING:
            return SessionUIState(True, "Join", False, False)
        if window == TimeWindowEnum.UPCOMING:
            return SessionUIState(False, "Not Started", True, True)
        return SessionUIState(False, "Session Ended", False, False)
    if status in _AWAITING_STATUSES:
        return SessionUIState(False, "Awaiting Approval", False, False)
    if status == BookingStatusEnum.CANCELLED:
        return SessionUIState(False, "Cancelled", False, False)
    if status == BookingStatusEnum.COMPLETED:
        return SessionUIState(False, "Session Completed", False, False)
    raise ValueError(f"Unhandled booking status: {status!r}")


def session_ui_state(
    date_value: str,
    time_value: str,
    status: BookingStatusEnum,
    now: datetime,
    tz: tzinfo | None = None,
) -> tuple[TimeWindowEnum, SessionUIState]:
    """Classify a stored slot against ``now`` and derive its UI state."""
    window = session_window(date_value, time_value, tz)
    position = classify_window(window.start, window.end, now)
    return position, derive_ui_state(status, position)
