"""Admin schemas."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from mentor_portal.core.enums import RoleEnum, UserStatusEnum
from mentor_portal.modules.access.schemas import PortalUser


class UserStatusActionEnum(StrEnum):
    """Moderation actions on the manage-users page."""

    APPROVE = "approve"
    REJECT = "reject"
    VERIFY = "verify"
    BAN = "ban"

    @property
    def target_status(self) -> UserStatusEnum:
        return _ACTION_STATUS[self]


_ACTION_STATUS = {
    UserStatusActionEnum.APPROVE: UserStatusEnum.ACTIVE,
    UserStatusActionEnum.REJECT: UserStatusEnum.REJECTED,
    UserStatusActionEnum.VERIFY: UserStatusEnum.VERIFIED,
    UserStatusActionEnum.BAN: UserStatusEnum.BANNED,
}


class AdminUserRead(PortalUser):
    """User row; status is None when upstream reports an unknown value."""

    status: UserStatusEnum | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> UserStatusEnum | None:
        return UserStatusEnum.parse(value)


class AdminUserUpdate(BaseModel):
    """Editable profile fields."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    roles: list[RoleEnum] | None = Field(default=None, min_length=1)

    @field_validator("roles", mode="before")
    @classmethod
    def normalize_roles(cls, value: object) -> object:
        if isinstance(value, list):
            return [RoleEnum.parse(item) or item for item in value]
        return value


class MeetingCreate(BaseModel):
    """Schedule a meeting with a set of participants."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    start_time: datetime
    end_time: datetime
    participants: list[EmailStr] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_range(self) -> MeetingCreate:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)


class MeetingRead(BaseModel):
    """Meeting as stored by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    description: str = ""
    start_time: datetime | None = Field(default=None, validation_alias=AliasChoices("start_time", "startTime"))
    duration: int = 0
    labels: list[str] = Field(default_factory=list)
    created_by: str | None = Field(default=None, validation_alias=AliasChoices("created_by", "createdBy"))
    zoom_join_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("zoom_join_url", "zoomJoinUrl", "join_url"),
    )

    @field_validator("created_by", mode="before")
    @classmethod
    def flatten_creator(cls, value: object) -> object:
        if isinstance(value, dict):
            return value.get("_id") or value.get("id") or value.get("email")
        return value

    @computed_field
    @property
    def end_time(self) -> datetime | None:
        if self.start_time is None:
            return None
        return self.start_time + timedelta(minutes=self.duration)
