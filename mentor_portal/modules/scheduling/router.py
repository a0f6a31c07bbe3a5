"""Mentor slot management router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from mentor_portal.core.enums import RoleEnum, SlotStatusEnum
from mentor_portal.modules.identity.service import require_roles
from mentor_portal.modules.scheduling.schemas import (
    MentorSlotsRead,
    SlotPreviewRead,
    SlotsCreatedRead,
    SlotsCreateRequest,
)
from mentor_portal.modules.scheduling.service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/mentor/manage-slots", tags=["scheduling"])


@router.get("", response_model=MentorSlotsRead)
async def list_mentor_slots(
    slot_status: SlotStatusEnum = Query(default=SlotStatusEnum.OPEN, alias="status"),
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(require_roles(RoleEnum.MENTOR)),
) -> MentorSlotsRead:
    """Own slots for the Open or Booked tab."""
    return await service.list_slots(current_user, slot_status)


@router.get("/preview", response_model=SlotPreviewRead)
async def preview_slots(
    start_time: str | None = Query(default=None),
    end_time: str | None = Query(default=None),
    slot_duration: int | None = Query(default=None, gt=0),
    buffer: int | None = Query(default=None, ge=0),
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(require_roles(RoleEnum.MENTOR)),
) -> SlotPreviewRead:
    return service.preview(start_time, end_time, slot_duration, buffer)


@router.post("", response_model=SlotsCreatedRead, status_code=status.HTTP_201_CREATED)
async def create_slots(
    payload: SlotsCreateRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(require_roles(RoleEnum.MENTOR)),
) -> SlotsCreatedRead:
    """Publish availability for the selected weekdays."""
    return await service.create_slots(current_user, payload)
