"""HTTP middleware applying access gate decisions to incoming requests."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse

from mentor_portal.core.metrics import record_gate_decision
from mentor_portal.modules.access.service import build_access_gate

logger = logging.getLogger(__name__)


async def enforce_access_gate(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Redirect requests the gate rejects; expose the resolved user otherwise."""
    gate = build_access_gate(request.app.state.backend_client)
    decision = await gate.evaluate(request.url.path, request.cookies)
    record_gate_decision(decision.action.value, decision.reason.value)

    if not decision.allowed:
        logger.info(
            "Access gate redirect %s -> %s (%s)",
            request.url.path,
            decision.target,
            decision.reason.value,
        )
        return RedirectResponse(
            url=decision.target or gate.routes.entry_path,
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    request.state.portal_user = decision.user
    request.state.portal_role = decision.role
    return await call_next(request)
