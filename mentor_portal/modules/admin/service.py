"""Admin page logic: user moderation, meetings and session policy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends
from pydantic import ValidationError

from mentor_portal.core.backend import BackendClient, get_backend_client
from mentor_portal.modules.admin.schemas import (
    AdminUserRead,
    AdminUserUpdate,
    MeetingCreate,
    MeetingRead,
    UserStatusActionEnum,
)
from mentor_portal.modules.identity.service import CurrentUser
from mentor_portal.modules.scheduling.schemas import DEFAULT_SESSION_POLICY, SessionPolicy
from mentor_portal.shared.exceptions import BusinessRuleException, UpstreamUnavailableException

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _matches(user: AdminUserRead, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    haystack = [user.name.lower(), user.email.lower(), *(role.value for role in user.roles)]
    return any(needle in item for item in haystack)


def _meeting_sort_key(meeting: MeetingRead) -> datetime:
    if meeting.start_time is None:
        return _OLDEST
    if meeting.start_time.tzinfo is None:
        return meeting.start_time.replace(tzinfo=timezone.utc)
    return meeting.start_time


class AdminService:
    """Admin operations proxied to the backend."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def list_users(self, admin: CurrentUser, term: str | None = None) -> list[AdminUserRead]:
        records = await self.backend.list_users(admin.token)
        users = [AdminUserRead.model_validate(record) for record in records]
        if term:
            users = [user for user in users if _matches(user, term)]
        return users

    async def set_user_status(
        self,
        admin: CurrentUser,
        user_id: str,
        action: UserStatusActionEnum,
    ) -> AdminUserRead:
        """Approve, reject, verify or ban an account."""
        target = action.target_status
        updated = await self.backend.update_user(
            admin.token,
            user_id,
            {"status": target.upstream_value},
        )
        logger.info("Admin %s set user %s status to %s", admin.user_id, user_id, target.value)
        return AdminUserRead.model_validate(updated or {"_id": user_id, "status": target.value})

    async def update_user(
        self,
        admin: CurrentUser,
        user_id: str,
        payload: AdminUserUpdate,
    ) -> AdminUserRead:
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise BusinessRuleException("Nothing to update")
        if payload.roles is not None:
            changes["roles"] = [role.upstream_value for role in payload.roles]
        updated = await self.backend.update_user(admin.token, user_id, changes)
        return AdminUserRead.model_validate(updated or {"_id": user_id, **changes})

    async def delete_user(self, admin: CurrentUser, user_id: str) -> None:
        if user_id == admin.user_id:
            raise BusinessRuleException("You cannot delete your own account")
        await self.backend.delete_user(admin.token, user_id)
        logger.info("Admin %s deleted user %s", admin.user_id, user_id)

    async def list_meetings(self, admin: CurrentUser) -> list[MeetingRead]:
        """Meetings, most recent start first."""
        meetings = [MeetingRead.model_validate(item) for item in await self.backend.list_meetings(admin.token)]
        return sorted(meetings, key=_meeting_sort_key, reverse=True)

    async def create_meeting(self, admin: CurrentUser, payload: MeetingCreate) -> MeetingRead:
        meeting = {
            "title": payload.title.strip(),
            "description": payload.description,
            "startTime": payload.start_time.isoformat(),
            "duration": payload.duration_minutes,
            "labels": [str(email) for email in payload.participants],
            "createdBy": admin.user_id,
        }
        created = await self.backend.create_meeting(admin.token, meeting)
        return MeetingRead.model_validate(created or meeting)

    async def get_session_policy(self, admin: CurrentUser) -> SessionPolicy:
        """Stored policy merged over the defaults."""
        stored = await self.backend.get_session_policy(admin.token) or {}
        merged = {**DEFAULT_SESSION_POLICY.model_dump(by_alias=True), **stored}
        try:
            return SessionPolicy.model_validate(merged)
        except ValidationError as exc:
            raise UpstreamUnavailableException("Backend returned an invalid session policy") from exc

    async def update_session_policy(self, admin: CurrentUser, policy: SessionPolicy) -> SessionPolicy:
        saved = await self.backend.update_session_policy(admin.token, policy.model_dump(by_alias=True))
        logger.info("Admin %s updated session policy", admin.user_id)
        if not saved:
            return policy
        return SessionPolicy.model_validate({**policy.model_dump(by_alias=True), **saved})


async def get_admin_service(
    backend: BackendClient = Depends(get_backend_client),
) -> AdminService:
    """Dependency provider for admin service."""
    return AdminService(backend)
