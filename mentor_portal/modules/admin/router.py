"""Admin pages router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from mentor_portal.core.enums import RoleEnum
from mentor_portal.modules.admin.schemas import (
    AdminUserRead,
    AdminUserUpdate,
    MeetingCreate,
    MeetingRead,
    UserStatusActionEnum,
)
from mentor_portal.modules.admin.service import AdminService, get_admin_service
from mentor_portal.modules.identity.service import require_roles
from mentor_portal.modules.scheduling.schemas import SessionPolicy

router = APIRouter(prefix="/admin", tags=["admin"])

require_admin = require_roles(RoleEnum.ADMIN)


@router.get("/manage-users", response_model=list[AdminUserRead])
async def list_users(
    q: str | None = Query(default=None, max_length=255),
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> list[AdminUserRead]:
    """Users filtered by a name, email or role term."""
    return await service.list_users(current_user, q)


@router.post("/manage-users/{user_id}/{action}", response_model=AdminUserRead)
async def change_user_status(
    user_id: str,
    action: UserStatusActionEnum,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> AdminUserRead:
    return await service.set_user_status(current_user, user_id, action)


@router.put("/manage-users/{user_id}", response_model=AdminUserRead)
async def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> AdminUserRead:
    """Edit a user's profile or roles."""
    return await service.update_user(current_user, user_id, payload)


@router.delete("/manage-users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> None:
    await service.delete_user(current_user, user_id)


@router.get("/meetings", response_model=list[MeetingRead])
async def list_meetings(
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> list[MeetingRead]:
    return await service.list_meetings(current_user)


@router.post("/meetings", response_model=MeetingRead, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    payload: MeetingCreate,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> MeetingRead:
    """Schedule a meeting; participants become its labels."""
    return await service.create_meeting(current_user, payload)


@router.get("/settings/session-policy", response_model=SessionPolicy)
async def get_session_policy(
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> SessionPolicy:
    return await service.get_session_policy(current_user)


@router.put("/settings/session-policy", response_model=SessionPolicy)
async def update_session_policy(
    payload: SessionPolicy,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_admin),
) -> SessionPolicy:
    """Replace slot authoring defaults."""
    return await service.update_session_policy(current_user, payload)
