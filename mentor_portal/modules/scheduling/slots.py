"""Helpers for authoring and listing mentor availability slots."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from mentor_portal.modules.scheduling.timewindow import format_clock_time, format_date
from mentor_portal.shared.exceptions import ParseError

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def parse_24h_time(value: str, field: str = "time") -> int:
    """Parse ``HH:MM`` (24-hour, as produced by time inputs) into minutes."""
    try:
        hours_text, minutes_text = value.split(":")
        hours, minutes = int(hours_text), int(minutes_text)
    except (AttributeError, ValueError) as exc:
        raise ParseError(field, value, "expected HH:MM") from exc
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ParseError(field, value, "expected HH:MM within a day")
    return hours * 60 + minutes


def _format_24h(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def generate_time_slots(
    start_time: str,
    end_time: str,
    slot_duration: int,
    buffer: int = 0,
) -> list[dict[str, str]]:
    """Split a working range into back-to-back slots separated by ``buffer``."""
    if slot_duration <= 0:
        raise ValueError("slot_duration must be positive")
    if buffer < 0:
        raise ValueError("buffer must not be negative")

    start = parse_24h_time(start_time, field="start_time")
    end = parse_24h_time(end_time, field="end_time")

    slots: list[dict[str, str]] = []
    while start + slot_duration <= end:
        slot_end = start + slot_duration
        slots.append(
            {
                "display": f"{format_clock_time(start)} - {format_clock_time(slot_end)}",
                "start": _format_24h(start),
                "end": _format_24h(slot_end),
            },
        )
        start = slot_end + buffer
    return slots


def next_day_occurrence(weekday: str, today: date) -> str:
    """Next strictly future date falling on ``weekday`` (``Mon``..``Sun``)."""
    try:
        target = WEEKDAY_ABBREVIATIONS.index(weekday[:3].title())
    except ValueError as exc:
        raise ParseError("day", weekday, "expected a weekday name") from exc
    days_ahead = target - today.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    return format_date(today + timedelta(days=days_ahead))


def next_days(count: int, today: date) -> list[dict[str, str]]:
    """Describe ``count`` consecutive days starting with ``today``."""
    days = []
    for offset in range(count):
        current = today + timedelta(days=offset)
        days.append(
            {
                "day": WEEKDAY_ABBREVIATIONS[current.weekday()],
                "date": format_date(current),
                "iso": current.isoformat(),
            },
        )
    return days


def current_week(today: date) -> list[dict[str, str]]:
    """Describe Monday through Sunday of the week containing ``today``."""
    return next_days(7, today - timedelta(days=today.weekday()))


def group_slots_by_date(slots: Iterable[Mapping[str, Any]]) -> dict[str, list[Mapping[str, Any]]]:
    """Bucket slots by their ``date`` field, preserving first-seen order."""
    grouped: dict[str, list[Mapping[str, Any]]] = {}
    for slot in slots:
        grouped.setdefault(str(slot.get("date", "")), []).append(slot)
    return grouped
