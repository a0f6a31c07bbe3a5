"""Student booking and mentor schedule routers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from mentor_portal.core.enums import RoleEnum, SessionTabEnum, SessionTypeEnum
from mentor_portal.modules.booking.schemas import (
    BookingCreate,
    BookingRescheduleRequest,
    HostRead,
    OpenSlotsRead,
    SessionListRead,
    SessionRead,
    SessionResponseRequest,
    StudentBookingPageRead,
)
from mentor_portal.modules.booking.service import BookingService, get_booking_service
from mentor_portal.modules.identity.service import require_roles

student_router = APIRouter(prefix="/student/slot-booking", tags=["booking"])
mentor_router = APIRouter(prefix="/mentor/schedule", tags=["booking"])


@student_router.get("", response_model=StudentBookingPageRead)
async def student_bookings_page(
    tab: SessionTabEnum = Query(default=SessionTabEnum.UPCOMING),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> StudentBookingPageRead:
    """Student sessions for the selected tab."""
    return await service.student_page(current_user, tab)


@student_router.get("/mentors", response_model=list[HostRead])
async def list_hosts(
    session_type: SessionTypeEnum = Query(...),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> list[HostRead]:
    return await service.list_hosts(current_user, session_type)


@student_router.get("/slots", response_model=OpenSlotsRead)
async def list_open_slots(
    mentor_id: str = Query(..., min_length=1),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> OpenSlotsRead:
    """Open slots of one host for the coming week."""
    return await service.open_slots(current_user, mentor_id)


@student_router.post("/bookings", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> SessionRead:
    return await service.create_booking(current_user, payload)


@student_router.post("/bookings/{booking_id}/cancel", response_model=SessionRead)
async def request_cancellation(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> SessionRead:
    """Ask the mentor to cancel a session."""
    return await service.request_cancellation(current_user, booking_id)


@student_router.post("/bookings/{booking_id}/reschedule", response_model=SessionRead)
async def request_reschedule(
    booking_id: str,
    payload: BookingRescheduleRequest,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> SessionRead:
    """Ask the mentor to move a session to a new date and time."""
    return await service.request_reschedule(current_user, booking_id, payload)


@mentor_router.get("", response_model=SessionListRead)
async def mentor_schedule_page(
    tab: SessionTabEnum = Query(default=SessionTabEnum.UPCOMING),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.MENTOR)),
) -> SessionListRead:
    """Mentor sessions for the selected tab."""
    return await service.list_sessions(current_user, tab)


@mentor_router.put("/{booking_id}/response", status_code=status.HTTP_204_NO_CONTENT)
async def respond_to_request(
    booking_id: str,
    payload: SessionResponseRequest,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.MENTOR)),
) -> None:
    """Accept or reject a student's cancel or reschedule request."""
    await service.respond(current_user, booking_id, payload.response)
