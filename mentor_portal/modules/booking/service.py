"""Booking page logic: session decoration, booking and change requests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from fastapi import Depends

from mentor_portal.core.backend import BackendClient, get_backend_client
from mentor_portal.core.config import Settings, get_settings
from mentor_portal.core.enums import (
    BookingStatusEnum,
    SessionTabEnum,
    SessionTypeEnum,
    SlotStatusEnum,
    TimeWindowEnum,
)
from mentor_portal.modules.booking.schemas import (
    BookingCreate,
    BookingRescheduleRequest,
    CalendarDayRead,
    HostRead,
    OpenSlotRead,
    OpenSlotsRead,
    SessionListRead,
    SessionRead,
    SessionUIStateRead,
    StudentBookingPageRead,
)
from mentor_portal.modules.identity.service import CurrentUser
from mentor_portal.modules.scheduling.slots import group_slots_by_date, next_days
from mentor_portal.modules.scheduling.timewindow import (
    classify_window,
    derive_ui_state,
    parse_date,
    session_window,
)
from mentor_portal.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    ParseError,
)
from mentor_portal.shared.utils import portal_now

logger = logging.getLogger(__name__)

_PENDING_REQUEST_STATUSES = frozenset(
    {
        BookingStatusEnum.CANCELLATION_REQUESTED,
        BookingStatusEnum.RESCHEDULE_REQUESTED,
    },
)


def _record_id(record: Mapping[str, Any]) -> str:
    return str(record.get("_id") or record.get("id") or "")


def decorate_session(record: Mapping[str, Any], now: datetime, tz: ZoneInfo) -> SessionRead:
    """Attach window and UI state to a raw backend booking.

    Malformed slot strings or unknown statuses leave ``window``/``ui_state``
    empty so the page can fall back to the raw values.
    """
    slot = record.get("slot") or {}
    raw_date = str(slot.get("date", ""))
    raw_time = str(slot.get("time", ""))
    raw_status = str(record.get("status", ""))
    session = SessionRead(
        id=_record_id(record),
        status=raw_status,
        date=raw_date,
        time=raw_time,
        session_type=record.get("sessionType"),
        mode=record.get("mode"),
        agenda=record.get("agenda"),
        mentor=record.get("mentor"),
        student=record.get("student"),
        zoom_join_url=record.get("zoomJoinUrl"),
    )

    try:
        window = session_window(raw_date, raw_time, tz)
    except ParseError as exc:
        logger.warning("Booking %s has unparseable slot: %s", session.id, exc.message)
        return session

    position = classify_window(window.start, window.end, now)
    session.start_at = window.start
    session.end_at = window.end
    session.window = position

    try:
        status = BookingStatusEnum(raw_status)
    except ValueError:
        logger.warning("Booking %s has unknown status %r", session.id, raw_status)
        return session

    session.ui_state = SessionUIStateRead.model_validate(derive_ui_state(status, position))
    return session


def filter_sessions(sessions: list[SessionRead], tab: SessionTabEnum) -> list[SessionRead]:
    """Upcoming keeps running sessions so their Join button stays reachable."""
    if tab == SessionTabEnum.ALL:
        return sessions
    if tab == SessionTabEnum.PAST:
        return [item for item in sessions if item.window == TimeWindowEnum.PAST]
    return [
        item
        for item in sessions
        if item.window in (TimeWindowEnum.UPCOMING, TimeWindowEnum.ONGOING)
    ]


def _sort_key(session: SessionRead) -> tuple[int, float]:
    if session.start_at is None:
        return (1, 0.0)
    return (0, session.start_at.timestamp())


class BookingService:
    """Student booking and mentor schedule flows."""

    def __init__(
        self,
        backend: BackendClient,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.settings = settings
        self.tz = ZoneInfo(settings.portal_timezone)
        self._clock = clock or (lambda: portal_now(settings.portal_timezone))

    def now(self) -> datetime:
        return self._clock()

    async def _sessions(self, user: CurrentUser) -> list[SessionRead]:
        records = await self.backend.list_bookings(user.token, user.user_id)
        now = self.now()
        sessions = [decorate_session(record, now, self.tz) for record in records]
        return sorted(sessions, key=_sort_key)

    async def list_sessions(self, user: CurrentUser, tab: SessionTabEnum) -> SessionListRead:
        """Sessions of the caller (student or mentor) for a schedule tab."""
        items = filter_sessions(await self._sessions(user), tab)
        return SessionListRead(tab=tab, items=items, total=len(items))

    async def student_page(self, user: CurrentUser, tab: SessionTabEnum) -> StudentBookingPageRead:
        sessions = await self._sessions(user)
        items = filter_sessions(sessions, tab)
        return StudentBookingPageRead(
            tab=tab,
            items=items,
            total=len(items),
            max_bookings=self.settings.max_bookings,
            booking_limit_reached=len(sessions) >= self.settings.max_bookings,
        )

    async def _find_session(self, user: CurrentUser, booking_id: str) -> tuple[dict, SessionRead]:
        records = await self.backend.list_bookings(user.token, user.user_id)
        now = self.now()
        for record in records:
            if _record_id(record) == booking_id:
                return record, decorate_session(record, now, self.tz)
        raise NotFoundException("Booking not found")

    def _ensure_future_slot(self, date_value: str, time_value: str) -> None:
        window = session_window(date_value, time_value, self.tz)
        if classify_window(window.start, window.end, self.now()) != TimeWindowEnum.UPCOMING:
            raise BusinessRuleException("Cannot book a slot that has already started")

    async def create_booking(self, user: CurrentUser, payload: BookingCreate) -> SessionRead:
        """Book an open slot, enforcing the per-student booking limit."""
        existing = await self.backend.list_bookings(user.token, user.user_id)
        if len(existing) >= self.settings.max_bookings:
            raise BusinessRuleException("You have reached your maximum booking limit.")

        self._ensure_future_slot(payload.date, payload.time)

        booking = {
            "student": user.user_id,
            "mentor": payload.mentor_id,
            "sessionType": payload.session_type.value,
            "mode": payload.mode,
            "slot": {"slotId": payload.slot_id, "date": payload.date, "time": payload.time},
            "agenda": payload.agenda.strip(),
        }
        created = await self.backend.create_booking(user.token, booking)
        return decorate_session(
            created or {**booking, "status": BookingStatusEnum.BOOKED.value},
            self.now(),
            self.tz,
        )

    async def request_cancellation(self, user: CurrentUser, booking_id: str) -> SessionRead:
        record, session = await self._find_session(user, booking_id)
        self._ensure_change_allowed(session, "cancel")
        updated = await self.backend.update_booking(
            user.token,
            booking_id,
            {"status": BookingStatusEnum.CANCELLATION_REQUESTED.value},
        )
        return decorate_session(updated or {**record, "status": "Cancellation Requested"}, self.now(), self.tz)

    async def request_reschedule(
        self,
        user: CurrentUser,
        booking_id: str,
        payload: BookingRescheduleRequest,
    ) -> SessionRead:
        record, session = await self._find_session(user, booking_id)
        self._ensure_change_allowed(session, "reschedule")
        self._ensure_future_slot(payload.date, payload.time)

        slot = {**(record.get("slot") or {}), "date": payload.date, "time": payload.time}
        change = {"status": BookingStatusEnum.RESCHEDULE_REQUESTED.value, "slot": slot}
        updated = await self.backend.update_booking(user.token, booking_id, change)
        return decorate_session(updated or {**record, **change}, self.now(), self.tz)

    @staticmethod
    def _ensure_change_allowed(session: SessionRead, action: str) -> None:
        if session.status in _PENDING_REQUEST_STATUSES:
            raise ConflictException("A change request for this session is already awaiting approval")
        state = session.ui_state
        allowed = state is not None and (
            state.cancel_allowed if action == "cancel" else state.reschedule_allowed
        )
        if not allowed:
            verb = "cancelled" if action == "cancel" else "rescheduled"
            raise BusinessRuleException(f"This session can no longer be {verb}")

    async def respond(self, user: CurrentUser, booking_id: str, response: str) -> None:
        """Forward a mentor's answer to a student's request."""
        await self.backend.respond_to_booking(user.token, booking_id, response)

    async def list_hosts(self, user: CurrentUser, session_type: SessionTypeEnum) -> list[HostRead]:
        """Mentors or ECs from the configured course roster."""
        course = await self.backend.get_course(user.token, self.settings.course_id)
        roster = (course or {}).get(session_type.course_roster_key) or []
        ids = [_record_id(item) for item in roster if _record_id(item)]
        if not ids:
            return []
        users = await self.backend.list_users(user.token, ids=ids)
        return [
            HostRead(
                id=_record_id(item),
                name=item.get("name", ""),
                email=item.get("email", ""),
                roles=list(item.get("roles") or []),
            )
            for item in users
        ]

    async def open_slots(self, user: CurrentUser, mentor_id: str) -> OpenSlotsRead:
        """Open slots of a mentor dated within the booking look-ahead."""
        today = self.now().date()
        horizon = today + timedelta(days=self.settings.booking_lookahead_days)
        slots = await self.backend.list_slots(user.token, mentor_id, SlotStatusEnum.OPEN.value)

        dated: list[tuple[datetime, dict]] = []
        for slot in slots:
            try:
                slot_date = parse_date(str(slot.get("date", "")))
            except ParseError as exc:
                logger.warning("Skipping slot %s: %s", _record_id(slot), exc.message)
                continue
            if today <= slot_date.date() <= horizon:
                dated.append((slot_date, slot))
        dated.sort(key=lambda item: item[0])

        grouped = group_slots_by_date(slot for _, slot in dated)
        return OpenSlotsRead(
            mentor_id=mentor_id,
            calendar=[CalendarDayRead(**item) for item in next_days(self.settings.booking_lookahead_days, today)],
            days={
                day: [
                    OpenSlotRead(
                        id=_record_id(slot),
                        date=day,
                        time=str(slot.get("time", "")),
                        status=slot.get("status"),
                    )
                    for slot in day_slots
                ]
                for day, day_slots in grouped.items()
            },
        )


async def get_booking_service(
    backend: BackendClient = Depends(get_backend_client),
) -> BookingService:
    """Dependency provider for booking service."""
    return BookingService(backend, get_settings())
