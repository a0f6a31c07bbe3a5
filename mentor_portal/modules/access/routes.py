"""Role to page-prefix table consulted by the access gate."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from mentor_portal.core.enums import RoleEnum

ENTRY_PATH = "/"
ROLE_SELECTION_PATH = "/select-role"
PENDING_APPROVAL_PATH = "/pending-approval"

DEFAULT_ROLE_PREFIXES: Mapping[RoleEnum, tuple[str, ...]] = MappingProxyType(
    {
        RoleEnum.ADMIN: ("/admin/manage-users", "/admin/meetings", "/admin/settings"),
        RoleEnum.MENTOR: ("/mentor/schedule", "/mentor/manage-slots"),
        RoleEnum.STUDENT: ("/student/slot-booking",),
    },
)

DEFAULT_ROLE_LANDING: Mapping[RoleEnum, str] = MappingProxyType(
    {
        RoleEnum.ADMIN: "/admin/manage-users",
        RoleEnum.MENTOR: "/mentor/schedule",
        RoleEnum.STUDENT: "/student/slot-booking",
    },
)

DEFAULT_PUBLIC_PATHS = frozenset(
    {
        ENTRY_PATH,
        ROLE_SELECTION_PATH,
        "/health",
        "/ready",
        "/metrics",
        "/docs",
        "/redoc",
        "/openapi.json",
    },
)

DEFAULT_PUBLIC_PREFIXES = ("/static", "/images", "/favicon.ico", "/api")


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Static routing configuration for the access gate."""

    role_prefixes: Mapping[RoleEnum, tuple[str, ...]] = field(
        default_factory=lambda: DEFAULT_ROLE_PREFIXES,
    )
    role_landing: Mapping[RoleEnum, str] = field(default_factory=lambda: DEFAULT_ROLE_LANDING)
    public_paths: frozenset[str] = DEFAULT_PUBLIC_PATHS
    public_prefixes: tuple[str, ...] = DEFAULT_PUBLIC_PREFIXES
    entry_path: str = ENTRY_PATH
    role_selection_path: str = ROLE_SELECTION_PATH
    pending_approval_path: str = PENDING_APPROVAL_PATH

    def is_public(self, path: str) -> bool:
        return path in self.public_paths or path.startswith(self.public_prefixes)

    def allowed_prefixes(self, role: RoleEnum) -> tuple[str, ...]:
        return tuple(self.role_prefixes.get(role, ()))

    def default_path(self, role: RoleEnum) -> str:
        return self.role_landing.get(role, self.entry_path)

    def is_allowed(self, role: RoleEnum, path: str) -> bool:
        prefixes = self.allowed_prefixes(role)
        return bool(prefixes) and path.startswith(prefixes)

    def is_pending_path(self, path: str) -> bool:
        return path.startswith(self.pending_approval_path)


DEFAULT_ROUTE_TABLE = RouteTable()
