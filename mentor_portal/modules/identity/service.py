"""Identity logic: sign in, role selection and the current portal user."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError

from mentor_portal.core.backend import BackendClient, get_backend_client
from mentor_portal.core.config import get_settings
from mentor_portal.core.enums import RoleEnum, UserStatusEnum
from mentor_portal.core.security import is_token_expired, read_token_claims, user_id_from_claims
from mentor_portal.modules.access.routes import DEFAULT_ROUTE_TABLE, RouteTable
from mentor_portal.modules.access.schemas import PortalUser
from mentor_portal.modules.identity.schemas import (
    PendingApprovalRead,
    RoleOption,
    RoleSelectionRead,
    SignInRequest,
    SignInResponse,
)
from mentor_portal.shared.exceptions import (
    BusinessRuleException,
    CredentialMissingException,
    UnauthorizedException,
    UpstreamUnavailableException,
)
from mentor_portal.shared.utils import initials

ROLE_DETAILS: dict[RoleEnum, tuple[str, str]] = {
    RoleEnum.ADMIN: ("Admin", "Manage platform settings and users"),
    RoleEnum.MENTOR: ("Mentor", "Guide and assist students"),
    RoleEnum.STUDENT: ("Student", "Access lectures and assignments"),
}


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Caller identity resolved for a gated page request."""

    token: str
    user_id: str
    role: RoleEnum | None
    profile: PortalUser | None = None


class IdentityService:
    """Identity flows backed by the external backend."""

    def __init__(self, backend: BackendClient, routes: RouteTable = DEFAULT_ROUTE_TABLE) -> None:
        self.backend = backend
        self.routes = routes

    async def sign_in(self, payload: SignInRequest) -> tuple[str, SignInResponse]:
        """Exchange credentials for a backend token and pick the landing page."""
        result = await self.backend.sign_in(payload.email, payload.password)
        token = result.get("token") if isinstance(result, dict) else None
        if not token:
            raise UpstreamUnavailableException("Backend sign-in response carried no token")

        claims = read_token_claims(token) or {}
        if is_token_expired(claims):
            raise BusinessRuleException("Session expired. Please sign in again.")

        user_status = UserStatusEnum.parse(claims.get("status"))
        raw_roles = claims.get("roles") or claims.get("role") or []
        if isinstance(raw_roles, str):
            raw_roles = [raw_roles]
        roles = [role for role in (RoleEnum.parse(raw) for raw in raw_roles) if role is not None]

        if user_status == UserStatusEnum.PENDING:
            redirect_to = self.routes.pending_approval_path
        elif len(roles) == 1:
            redirect_to = self.routes.default_path(roles[0])
        else:
            redirect_to = self.routes.role_selection_path

        response = SignInResponse(
            redirect_to=redirect_to,
            status=user_status,
            role=roles[0] if len(roles) == 1 else None,
        )
        return token, response

    async def get_profile(self, token: str) -> PortalUser:
        payload = await self.backend.get_user_status(token)
        try:
            return PortalUser.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableException("Backend returned an invalid user status") from exc

    async def role_selection(self, token: str) -> RoleSelectionRead:
        profile = await self.get_profile(token)
        return RoleSelectionRead(
            name=profile.name,
            email=profile.email,
            roles=[
                RoleOption(role=role, label=ROLE_DETAILS[role][0], description=ROLE_DETAILS[role][1])
                for role in profile.roles
            ],
        )

    async def select_role(self, token: str, requested_role: str) -> tuple[RoleEnum, str]:
        """Validate that the caller holds ``requested_role``; return its landing path."""
        role = RoleEnum.parse(requested_role)
        if role is None:
            raise BusinessRuleException(f"Unknown role: {requested_role}")
        profile = await self.get_profile(token)
        if profile.status != UserStatusEnum.ACTIVE:
            raise UnauthorizedException("Account is not active")
        if role not in profile.roles:
            raise UnauthorizedException("You do not hold this role")
        return role, self.routes.default_path(role)

    async def pending_approval(self, token: str) -> PendingApprovalRead:
        profile = await self.get_profile(token)
        return PendingApprovalRead(
            name=profile.name,
            email=profile.email,
            initials=initials(profile.name or "User"),
            status=profile.status,
            roles=list(profile.roles),
        )


async def get_identity_service(
    backend: BackendClient = Depends(get_backend_client),
) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(backend)


def get_access_token(request: Request) -> str:
    """Read the backend token from its cookie."""
    token = request.cookies.get(get_settings().token_cookie_name)
    if not token:
        raise CredentialMissingException("Authentication required")
    return token


def get_current_user(request: Request, token: str = Depends(get_access_token)) -> CurrentUser:
    """Resolve the caller from gate state, token claims and the user-id cookie."""
    settings = get_settings()
    profile: PortalUser | None = getattr(request.state, "portal_user", None)
    role: RoleEnum | None = getattr(request.state, "portal_role", None)

    user_id = (
        (profile.id if profile is not None else None)
        or user_id_from_claims(read_token_claims(token))
        or request.cookies.get(settings.user_id_cookie_name)
    )
    if not user_id:
        raise UnauthorizedException("Cannot resolve current user")
    return CurrentUser(token=token, user_id=user_id, role=role, profile=profile)


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted for your role",
            )
        return current_user

    return _checker
