"""Identity routers: sign-in proxy plus role selection and pending pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from mentor_portal.core.config import get_settings
from mentor_portal.modules.access.routes import DEFAULT_ROUTE_TABLE
from mentor_portal.modules.identity.rate_limit import enforce_signin_rate_limit
from mentor_portal.modules.identity.schemas import (
    PendingApprovalRead,
    RoleSelectionRead,
    RoleSelectRequest,
    RoleSelectResponse,
    SignInRequest,
    SignInResponse,
    SignOutResponse,
)
from mentor_portal.modules.identity.service import (
    IdentityService,
    get_access_token,
    get_identity_service,
)

auth_router = APIRouter(prefix="/auth", tags=["identity"])
pages_router = APIRouter(tags=["identity"])


@auth_router.post(
    "/signin",
    response_model=SignInResponse,
    dependencies=[Depends(enforce_signin_rate_limit)],
)
async def sign_in(
    payload: SignInRequest,
    response: Response,
    service: IdentityService = Depends(get_identity_service),
) -> SignInResponse:
    """Sign in through the backend and store its token in a cookie."""
    settings = get_settings()
    token, result = await service.sign_in(payload)
    response.set_cookie(
        settings.token_cookie_name,
        token,
        max_age=settings.token_cookie_max_age_seconds,
        path="/",
        samesite="strict",
        secure=settings.is_production,
        httponly=True,
    )
    response.delete_cookie(settings.selected_role_cookie_name, path="/")
    return result


@auth_router.post("/signout", response_model=SignOutResponse)
async def sign_out(response: Response) -> SignOutResponse:
    """Forget the token and any selected role."""
    settings = get_settings()
    response.delete_cookie(settings.token_cookie_name, path="/")
    response.delete_cookie(settings.selected_role_cookie_name, path="/")
    return SignOutResponse(redirect_to=DEFAULT_ROUTE_TABLE.entry_path)


@pages_router.get("/select-role", response_model=RoleSelectionRead)
async def role_selection_page(
    token: str = Depends(get_access_token),
    service: IdentityService = Depends(get_identity_service),
) -> RoleSelectionRead:
    """List the roles the signed-in user can act as."""
    return await service.role_selection(token)


@pages_router.post("/select-role", response_model=RoleSelectResponse)
async def select_role(
    payload: RoleSelectRequest,
    response: Response,
    token: str = Depends(get_access_token),
    service: IdentityService = Depends(get_identity_service),
) -> RoleSelectResponse:
    """Remember the chosen role and point at its dashboard."""
    settings = get_settings()
    role, redirect_to = await service.select_role(token, payload.role)
    response.set_cookie(
        settings.selected_role_cookie_name,
        role.value,
        path="/",
        samesite="lax",
        secure=settings.is_production,
    )
    return RoleSelectResponse(role=role, redirect_to=redirect_to)


@pages_router.get("/pending-approval", response_model=PendingApprovalRead)
async def pending_approval_page(
    token: str = Depends(get_access_token),
    service: IdentityService = Depends(get_identity_service),
) -> PendingApprovalRead:
    """Show the waiting-for-approval card."""
    return await service.pending_approval(token)
