"""Access gate schemas."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from mentor_portal.core.enums import RoleEnum, UserStatusEnum

logger = logging.getLogger(__name__)


class PortalUser(BaseModel):
    """User status as reported by the backend, normalized to closed enums."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id", "userId"))
    name: str = ""
    email: str = ""
    status: UserStatusEnum
    roles: tuple[RoleEnum, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def merge_single_role(cls, data: Any) -> Any:
        """Accept either ``role`` or ``roles`` from upstream."""
        if isinstance(data, dict) and "roles" not in data and "role" in data:
            data = {**data, "roles": [data["role"]]}
        return data

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> object:
        parsed = UserStatusEnum.parse(value)
        return parsed if parsed is not None else value

    @field_validator("roles", mode="before")
    @classmethod
    def normalize_roles(cls, value: object) -> tuple[RoleEnum, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        roles: list[RoleEnum] = []
        for raw in value:
            role = RoleEnum.parse(raw)
            if role is None:
                logger.warning("Ignoring unrecognised role %r from backend", raw)
            elif role not in roles:
                roles.append(role)
        return tuple(roles)


class GateAction(StrEnum):
    """Terminal outcome of the access gate."""

    ALLOW = "allow"
    REDIRECT = "redirect"


class GateReason(StrEnum):
    """Why the gate reached its outcome."""

    PUBLIC = "public"
    AUTHORIZED = "authorized"
    CREDENTIAL_MISSING = "credential_missing"
    TOKEN_EXPIRED = "token_expired"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    PENDING_APPROVAL = "pending_approval"
    ROLE_SELECTION_REQUIRED = "role_selection_required"
    ROLE_MISMATCH = "role_mismatch"
    DENIED = "denied"
    GATE_ERROR = "gate_error"


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Allow the request through, or redirect it to ``target``."""

    action: GateAction
    reason: GateReason
    target: str | None = None
    user: PortalUser | None = None
    role: RoleEnum | None = None

    @classmethod
    def allow(
        cls,
        reason: GateReason,
        user: PortalUser | None = None,
        role: RoleEnum | None = None,
    ) -> GateDecision:
        return cls(GateAction.ALLOW, reason, None, user, role)

    @classmethod
    def redirect(cls, target: str, reason: GateReason) -> GateDecision:
        return cls(GateAction.REDIRECT, reason, target)

    @property
    def allowed(self) -> bool:
        return self.action == GateAction.ALLOW
