"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def portal_now(tz_name: str) -> datetime:
    """Return the current instant expressed in the portal timezone."""
    return utc_now().astimezone(ZoneInfo(tz_name))


def initials(name: str) -> str:
    """Build avatar initials from a display name."""
    return "".join(word[0] for word in name.split() if word).upper()
