"""Identity schemas."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from mentor_portal.core.enums import RoleEnum, UserStatusEnum


class SignInRequest(BaseModel):
    """Credentials forwarded to the backend."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SignInResponse(BaseModel):
    """Where the browser should go after a successful sign in."""

    redirect_to: str
    status: UserStatusEnum | None = None
    role: RoleEnum | None = None


class SignOutResponse(BaseModel):
    redirect_to: str


class RoleOption(BaseModel):
    """One selectable role card."""

    role: RoleEnum
    label: str
    description: str


class RoleSelectionRead(BaseModel):
    """Role selection page view model."""

    name: str
    email: str
    roles: list[RoleOption]


class RoleSelectRequest(BaseModel):
    role: str = Field(min_length=1, max_length=32)


class RoleSelectResponse(BaseModel):
    role: RoleEnum
    redirect_to: str


class PendingApprovalRead(BaseModel):
    """Pending approval page view model."""

    name: str
    email: str
    initials: str
    status: UserStatusEnum
    roles: list[RoleEnum]
