from __future__ import annotations

from datetime import date

import pytest

from mentor_portal.modules.scheduling.slots import (
    current_week,
    generate_time_slots,
    group_slots_by_date,
    next_day_occurrence,
    next_days,
    parse_24h_time,
)
from mentor_portal.shared.exceptions import ParseError


def test_generate_time_slots_applies_buffer_between_slots() -> None:
    slots = generate_time_slots("09:00", "11:00", 30, 15)

    assert [slot["start"] for slot in slots] == ["09:00", "09:45", "10:30"]
    assert slots[0]["display"] == "9:00 AM - 9:30 AM"
    assert slots[-1]["end"] == "11:00"


def test_generate_time_slots_drops_partial_trailing_slot() -> None:
    slots = generate_time_slots("09:00", "10:20", 30)
    assert [slot["display"] for slot in slots] == ["9:00 AM - 9:30 AM", "9:30 AM - 10:00 AM"]


def test_generate_time_slots_validates_inputs() -> None:
    with pytest.raises(ValueError):
        generate_time_slots("09:00", "10:00", 0)
    with pytest.raises(ValueError):
        generate_time_slots("09:00", "10:00", 30, -5)
    with pytest.raises(ParseError):
        generate_time_slots("25:00", "10:00", 30)


def test_parse_24h_time() -> None:
    assert parse_24h_time("9:05") == 545
    assert parse_24h_time("23:59") == 23 * 60 + 59
    with pytest.raises(ParseError):
        parse_24h_time("9 AM")


def test_next_day_occurrence_is_strictly_in_the_future() -> None:
    wednesday = date(2025, 3, 5)
    assert next_day_occurrence("Wed", wednesday) == "12-03-2025"
    assert next_day_occurrence("Thu", wednesday) == "06-03-2025"
    assert next_day_occurrence("monday", wednesday) == "10-03-2025"


def test_next_day_occurrence_rejects_unknown_day() -> None:
    with pytest.raises(ParseError):
        next_day_occurrence("Funday", date(2025, 3, 5))


def test_next_days_and_current_week() -> None:
    days = next_days(3, date(2025, 12, 31))
    assert [item["date"] for item in days] == ["31-12-2025", "01-01-2026", "02-01-2026"]
    assert days[0]["day"] == "Wed"

    week = current_week(date(2025, 3, 5))
    assert week[0]["day"] == "Mon"
    assert week[0]["iso"] == "2025-03-03"
    assert len(week) == 7


def test_group_slots_by_date_keeps_first_seen_order() -> None:
    grouped = group_slots_by_date(
        [
            {"date": "06-03-2025", "time": "a"},
            {"date": "05-03-2025", "time": "b"},
            {"date": "06-03-2025", "time": "c"},
        ],
    )
    assert list(grouped) == ["06-03-2025", "05-03-2025"]
    assert [slot["time"] for slot in grouped["06-03-2025"]] == ["a", "c"]
