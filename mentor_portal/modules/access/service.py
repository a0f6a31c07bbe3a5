"""Request-time authorization: (path, cookies) -> allow or redirect."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import ValidationError

from mentor_portal.core.backend import BackendClient
from mentor_portal.core.config import get_settings
from mentor_portal.core.enums import RoleEnum, UserStatusEnum
from mentor_portal.core.security import is_token_expired, read_token_claims
from mentor_portal.modules.access.routes import DEFAULT_ROUTE_TABLE, RouteTable
from mentor_portal.modules.access.schemas import GateDecision, GateReason, PortalUser
from mentor_portal.shared.exceptions import AppException

logger = logging.getLogger(__name__)

StatusLookup = Callable[[str], Awaitable[dict[str, Any]]]


def decide_role_access(routes: RouteTable, role: RoleEnum, path: str) -> GateDecision:
    """Allow iff ``path`` lies under one of the role's prefixes."""
    if routes.is_allowed(role, path):
        return GateDecision.allow(GateReason.AUTHORIZED, role=role)
    return GateDecision.redirect(routes.default_path(role), GateReason.ROLE_MISMATCH)


def decide_for_user(
    routes: RouteTable,
    user: PortalUser,
    path: str,
    selected_role: str | None,
) -> GateDecision:
    """Gate decision once the backend has told us who the caller is."""
    if user.status == UserStatusEnum.PENDING:
        if routes.is_pending_path(path):
            return GateDecision.allow(GateReason.PENDING_APPROVAL, user=user)
        return GateDecision.redirect(routes.pending_approval_path, GateReason.PENDING_APPROVAL)

    if user.status != UserStatusEnum.ACTIVE or not user.roles:
        return GateDecision.redirect(routes.entry_path, GateReason.DENIED)

    if len(user.roles) == 1:
        role = user.roles[0]
    else:
        role = RoleEnum.parse(selected_role)
        if role is None or role not in user.roles:
            if path == routes.role_selection_path:
                return GateDecision.allow(GateReason.ROLE_SELECTION_REQUIRED, user=user)
            return GateDecision.redirect(
                routes.role_selection_path,
                GateReason.ROLE_SELECTION_REQUIRED,
            )

    decision = decide_role_access(routes, role, path)
    if decision.allowed:
        return GateDecision.allow(GateReason.AUTHORIZED, user=user, role=role)
    return decision


class AccessGate:
    """Evaluates a request's cookies against the role route table.

    The gate never raises: every failure resolves to a redirect to the entry
    path.
    """

    def __init__(
        self,
        status_lookup: StatusLookup,
        routes: RouteTable = DEFAULT_ROUTE_TABLE,
        *,
        token_cookie: str = "token",
        selected_role_cookie: str = "selectedRole",
    ) -> None:
        self.status_lookup = status_lookup
        self.routes = routes
        self.token_cookie = token_cookie
        self.selected_role_cookie = selected_role_cookie

    async def evaluate(self, path: str, cookies: Mapping[str, str]) -> GateDecision:
        try:
            return await self._evaluate(path, cookies)
        except Exception:
            logger.exception("Access gate error for path %s", path)
            return GateDecision.redirect(self.routes.entry_path, GateReason.GATE_ERROR)

    async def _evaluate(self, path: str, cookies: Mapping[str, str]) -> GateDecision:
        if self.routes.is_public(path):
            return GateDecision.allow(GateReason.PUBLIC)

        token = cookies.get(self.token_cookie)
        if not token:
            return GateDecision.redirect(self.routes.entry_path, GateReason.CREDENTIAL_MISSING)

        if is_token_expired(read_token_claims(token)):
            return GateDecision.redirect(self.routes.entry_path, GateReason.TOKEN_EXPIRED)

        try:
            payload = await self.status_lookup(token)
            user = PortalUser.model_validate(payload)
        except (AppException, ValidationError) as exc:
            logger.warning("User status lookup failed for path %s: %s", path, exc)
            return GateDecision.redirect(self.routes.entry_path, GateReason.UPSTREAM_UNAVAILABLE)

        return decide_for_user(self.routes, user, path, cookies.get(self.selected_role_cookie))


def build_access_gate(backend: BackendClient) -> AccessGate:
    settings = get_settings()
    return AccessGate(
        backend.get_user_status,
        token_cookie=settings.token_cookie_name,
        selected_role_cookie=settings.selected_role_cookie_name,
    )