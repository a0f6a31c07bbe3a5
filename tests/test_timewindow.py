from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from mentor_portal.core.enums import BookingStatusEnum, TimeWindowEnum
from mentor_portal.modules.scheduling.timewindow import (
    SessionUIState,
    TimeRange,
    classify_window,
    derive_ui_state,
    format_clock_time,
    format_date,
    format_time_range,
    parse_clock_time,
    parse_date,
    parse_time_range,
    session_ui_state,
    session_window,
)
from mentor_portal.shared.exceptions import ParseError

KOLKATA = ZoneInfo("Asia/Kolkata")


def test_parse_date_accepts_padded_and_unpadded_parts() -> None:
    assert parse_date("05-03-2025") == datetime(2025, 3, 5)
    assert parse_date("5-3-2025") == datetime(2025, 3, 5)


def test_parse_date_attaches_timezone_when_given() -> None:
    parsed = parse_date("29-02-2024", KOLKATA)
    assert parsed.tzinfo is KOLKATA
    assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (2024, 2, 29, 0)


@pytest.mark.parametrize("raw", ["2025-03-05", "31-02-2025", "", "05/03/2025", "aa-bb-cccc"])
def test_parse_date_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(ParseError) as exc:
        parse_date(raw)
    assert exc.value.field == "date"
    assert exc.value.value == raw


def test_parse_clock_time_handles_midnight_and_noon() -> None:
    assert parse_clock_time("12:00 AM") == 0
    assert parse_clock_time("0:00 AM") == 0
    assert parse_clock_time("12:00 PM") == 12 * 60
    assert parse_clock_time("1:15 PM") == 13 * 60 + 15
    assert parse_clock_time("9:05 am") == 9 * 60 + 5


@pytest.mark.parametrize("raw", ["13:00 PM", "0:30 PM", "9:60 AM", "9:00", "nine AM"])
def test_parse_clock_time_rejects_invalid_values(raw: str) -> None:
    with pytest.raises(ParseError):
        parse_clock_time(raw)


def test_parse_time_range_returns_minute_offsets() -> None:
    parsed = parse_time_range("9:00 AM - 9:30 AM")
    assert parsed == TimeRange(start_minutes=540, end_minutes=570)
    assert parsed.duration_minutes == 30


def test_parse_time_range_accepts_compact_separator() -> None:
    assert parse_time_range("11:30AM-12:15PM") == TimeRange(690, 735)


def test_parse_time_range_rejects_midnight_crossing() -> None:
    with pytest.raises(ParseError) as exc:
        session_window("29-02-2024", "11:00 PM - 12:00 AM")
    assert exc.value.field == "time"


def test_parse_time_range_allows_zero_length_range() -> None:
    assert parse_time_range("10:00 AM - 10:00 AM").duration_minutes == 0


@pytest.mark.parametrize(
    "canonical",
    ["9:00 AM - 9:30 AM", "12:00 PM - 1:00 PM", "12:00 AM - 12:30 AM", "11:15 PM - 11:59 PM"],
)
def test_format_time_range_restores_canonical_input(canonical: str) -> None:
    assert format_time_range(parse_time_range(canonical)) == canonical


def test_format_clock_time_renders_midnight_and_noon() -> None:
    assert format_clock_time(0) == "12:00 AM"
    assert format_clock_time(12 * 60) == "12:00 PM"
    with pytest.raises(ValueError):
        format_clock_time(24 * 60)


def test_format_date_pads_parts() -> None:
    assert format_date(date(2025, 3, 5)) == "05-03-2025"


def test_session_window_uses_absolute_instants() -> None:
    window = session_window("05-03-2025", "9:00 PM - 10:00 PM", KOLKATA)
    assert window.start == datetime(2025, 3, 5, 21, 0, tzinfo=KOLKATA)
    assert window.end - window.start == timedelta(hours=1)


def test_classify_window_is_monotonic_in_now() -> None:
    window = session_window("05-03-2025", "10:00 AM - 11:00 AM", KOLKATA)
    order = [TimeWindowEnum.UPCOMING, TimeWindowEnum.ONGOING, TimeWindowEnum.PAST]
    previous = 0
    instant = datetime(2025, 3, 5, 8, 0, tzinfo=KOLKATA)
    while instant < datetime(2025, 3, 5, 13, 0, tzinfo=KOLKATA):
        current = order.index(classify_window(window.start, window.end, instant))
        assert current >= previous
        previous = current
        instant += timedelta(minutes=7)
    assert previous == 2


def test_classify_window_bounds_are_inclusive() -> None:
    window = session_window("05-03-2025", "10:00 AM - 11:00 AM", KOLKATA)
    assert classify_window(window.start, window.end, window.start) == TimeWindowEnum.ONGOING
    assert classify_window(window.start, window.end, window.end) == TimeWindowEnum.ONGOING


def test_classify_window_compares_across_days() -> None:
    window = session_window("06-03-2025", "9:00 AM - 9:30 AM", KOLKATA)
    late_previous_evening = datetime(2025, 3, 5, 23, 0, tzinfo=KOLKATA)
    assert classify_window(window.start, window.end, late_previous_evening) == TimeWindowEnum.UPCOMING


NOT_STARTED = SessionUIState(False, "Not Started", True, True)
JOIN = SessionUIState(True, "Join", False, False)
ENDED = SessionUIState(False, "Session Ended", False, False)
AWAITING = SessionUIState(False, "Awaiting Approval", False, False)
CANCELLED = SessionUIState(False, "Cancelled", False, False)
COMPLETED = SessionUIState(False, "Session Completed", False, False)

# status -> state for (upcoming, ongoing, past)
UI_STATE_TABLE = {
    BookingStatusEnum.BOOKED: (NOT_STARTED, JOIN, ENDED),
    BookingStatusEnum.IN_PROGRESS: (NOT_STARTED, JOIN, ENDED),
    BookingStatusEnum.RESCHEDULED: (NOT_STARTED, JOIN, ENDED),
    BookingStatusEnum.CANCELLATION_REQUESTED: (AWAITING, AWAITING, AWAITING),
    BookingStatusEnum.RESCHEDULE_REQUESTED: (AWAITING, AWAITING, AWAITING),
    BookingStatusEnum.CANCELLED: (CANCELLED, CANCELLED, CANCELLED),
    BookingStatusEnum.COMPLETED: (COMPLETED, COMPLETED, COMPLETED),
}
WINDOWS = (TimeWindowEnum.UPCOMING, TimeWindowEnum.ONGOING, TimeWindowEnum.PAST)


def test_ui_state_table_covers_every_status() -> None:
    assert set(UI_STATE_TABLE) == set(BookingStatusEnum)


@pytest.mark.parametrize(
    ("status", "window", "expected"),
    [
        (status, window, expected)
        for status, row in UI_STATE_TABLE.items()
        for window, expected in zip(WINDOWS, row, strict=True)
    ],
)
def test_derive_ui_state_decision_table(
    status: BookingStatusEnum,
    window: TimeWindowEnum,
    expected: SessionUIState,
) -> None:
    assert derive_ui_state(status, window) == expected


def test_session_ui_state_combines_parsing_and_decision() -> None:
    now = datetime(2025, 3, 5, 10, 15, tzinfo=KOLKATA)
    position, state = session_ui_state(
        "05-03-2025",
        "10:00 AM - 11:00 AM",
        BookingStatusEnum.RESCHEDULED,
        now,
        KOLKATA,
    )
    assert position == TimeWindowEnum.ONGOING
    assert state.join_enabled is True
    assert state.join_label == "Join"
