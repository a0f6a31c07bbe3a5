"""Mentor slot management."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from fastapi import Depends

from mentor_portal.core.backend import BackendClient, get_backend_client
from mentor_portal.core.config import Settings, get_settings
from mentor_portal.core.enums import SlotStatusEnum
from mentor_portal.modules.identity.service import CurrentUser
from mentor_portal.modules.scheduling.schemas import (
    DEFAULT_SESSION_POLICY,
    MentorSlotRead,
    MentorSlotsRead,
    SessionPolicy,
    SlotPreviewItem,
    SlotPreviewRead,
    SlotsCreatedRead,
    SlotsCreateRequest,
)
from mentor_portal.modules.scheduling.slots import (
    current_week,
    generate_time_slots,
    group_slots_by_date,
    next_day_occurrence,
    parse_24h_time,
)
from mentor_portal.modules.scheduling.timewindow import format_clock_time, parse_date
from mentor_portal.shared.exceptions import BusinessRuleException, ParseError
from mentor_portal.shared.utils import portal_now

logger = logging.getLogger(__name__)


def _slot_display_time(slot: Mapping[str, Any]) -> str:
    """Prefer the stored 12-hour range, else derive it from 24-hour bounds."""
    if slot.get("time"):
        return str(slot["time"])
    try:
        start = parse_24h_time(str(slot.get("startTime", "")), field="startTime")
        end = parse_24h_time(str(slot.get("endTime", "")), field="endTime")
    except ParseError:
        return ""
    return f"{format_clock_time(start)} - {format_clock_time(end)}"


def _date_sort_key(value: str) -> tuple[int, datetime | str]:
    try:
        return (0, parse_date(value))
    except ParseError:
        return (1, value)


class SchedulingService:
    """Slot listing, preview and creation for the signed-in mentor."""

    def __init__(
        self,
        backend: BackendClient,
        settings: Settings,
        policy: SessionPolicy = DEFAULT_SESSION_POLICY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.settings = settings
        self.policy = policy
        self._clock = clock or (lambda: portal_now(settings.portal_timezone))

    async def list_slots(self, user: CurrentUser, slot_status: SlotStatusEnum) -> MentorSlotsRead:
        slots = await self.backend.list_slots(user.token, user.user_id, slot_status.value)
        grouped = group_slots_by_date(slots)
        days = {
            day: [
                MentorSlotRead(
                    id=str(slot.get("_id") or slot.get("id") or ""),
                    date=day,
                    time=_slot_display_time(slot),
                    start_time=slot.get("startTime"),
                    end_time=slot.get("endTime"),
                    status=slot.get("status"),
                )
                for slot in day_slots
            ]
            for day, day_slots in sorted(grouped.items(), key=lambda item: _date_sort_key(item[0]))
        }
        return MentorSlotsRead(
            status=slot_status,
            week=current_week(self._clock().date()),
            days=days,
            total=len(slots),
        )

    def preview(
        self,
        start_time: str | None = None,
        end_time: str | None = None,
        slot_duration: int | None = None,
        buffer: int | None = None,
    ) -> SlotPreviewRead:
        """Candidate slots, filling unspecified inputs from the session policy."""
        start_time = start_time or self.policy.time_range.start
        end_time = end_time or self.policy.time_range.end
        slot_duration = slot_duration if slot_duration is not None else self.policy.session_duration
        buffer = buffer if buffer is not None else self.policy.buffer_time
        try:
            slots = generate_time_slots(start_time, end_time, slot_duration, buffer)
        except ValueError as exc:
            raise BusinessRuleException(str(exc)) from exc
        return SlotPreviewRead(
            start_time=start_time,
            end_time=end_time,
            slot_duration=slot_duration,
            buffer=buffer,
            slots=[SlotPreviewItem(**item) for item in slots],
        )

    async def create_slots(self, user: CurrentUser, payload: SlotsCreateRequest) -> SlotsCreatedRead:
        """Publish slots on the next occurrence of each selected weekday."""
        today = self._clock().date()
        entries: list[dict[str, Any]] = []
        dates: list[str] = []
        seen_days: set[str] = set()

        for day_slots in payload.days:
            if day_slots.day in seen_days:
                raise BusinessRuleException(f"{day_slots.day} was submitted more than once")
            seen_days.add(day_slots.day)
            if day_slots.day not in self.policy.available_days:
                raise BusinessRuleException(f"Slots cannot be offered on {day_slots.day}")
            if len(day_slots.slots) > self.policy.max_slots_per_day:
                raise BusinessRuleException(
                    f"At most {self.policy.max_slots_per_day} slots are allowed per day",
                )

            slot_date = next_day_occurrence(day_slots.day, today)
            dates.append(slot_date)
            for window in day_slots.slots:
                entries.append(
                    {
                        "day": day_slots.day,
                        "date": slot_date,
                        "startTime": window.start,
                        "endTime": window.end,
                        "mentorId": user.user_id,
                    },
                )

        await self.backend.create_slots(user.token, user.user_id, entries)
        logger.info("Mentor %s published %s slot(s)", user.user_id, len(entries))
        return SlotsCreatedRead(created=len(entries), dates=dates)


async def get_scheduling_service(
    backend: BackendClient = Depends(get_backend_client),
) -> SchedulingService:
    """Dependency provider for scheduling service."""
    return SchedulingService(backend, get_settings())
