"""Core enums used across modules."""

from __future__ import annotations

from enum import StrEnum


class RoleEnum(StrEnum):
    """Portal roles.

    Upstream sends role names in either case (``ADMIN`` or ``admin``); values
    here are the canonical lowercase spelling.
    """

    ADMIN = "admin"
    MENTOR = "mentor"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: object) -> RoleEnum | None:
        """Normalize an upstream or cookie role name, None if unknown."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def upstream_value(self) -> str:
        return self.value.upper()


class UserStatusEnum(StrEnum):
    """Account approval status."""

    PENDING = "pending"
    ACTIVE = "active"
    VERIFIED = "verified"
    REJECTED = "rejected"
    BANNED = "banned"

    @classmethod
    def parse(cls, value: object) -> UserStatusEnum | None:
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def upstream_value(self) -> str:
        return self.value.upper()


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status as stored by the backend."""

    BOOKED = "Booked"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLATION_REQUESTED = "Cancellation Requested"
    RESCHEDULE_REQUESTED = "Reschedule Requested"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"


class SlotStatusEnum(StrEnum):
    """Mentor availability slot status."""

    OPEN = "Open"
    BOOKED = "Booked"


class TimeWindowEnum(StrEnum):
    """Position of a session relative to the current instant."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


class SessionTypeEnum(StrEnum):
    """Kinds of sessions a student can book."""

    EC_CONNECT = "Dost / EC Connect"
    MENTOR_CONNECT = "Mentor Connect"

    @property
    def course_roster_key(self) -> str:
        """Key of the course document listing the hosts for this type."""
        if self is SessionTypeEnum.EC_CONNECT:
            return "ECs"
        return "mentors"


class SessionTabEnum(StrEnum):
    """Session list filters used by schedule pages."""

    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"
