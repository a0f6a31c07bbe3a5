"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from mentor_portal.core.backend import BackendClient
from mentor_portal.core.config import get_settings
from mentor_portal.core.metrics import build_metrics_response, instrument_http_request
from mentor_portal.modules.access.middleware import enforce_access_gate
from mentor_portal.modules.admin.router import router as admin_router
from mentor_portal.modules.booking.router import mentor_router as mentor_schedule_router
from mentor_portal.modules.booking.router import student_router as student_booking_router
from mentor_portal.modules.identity.router import auth_router, pages_router
from mentor_portal.modules.scheduling.router import router as scheduling_router
from mentor_portal.shared.exceptions import register_exception_handlers
from mentor_portal.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s against %s", settings.app_name, settings.backend_api_url)

    owns_client = getattr(app.state, "backend_client", None) is None
    if owns_client:
        app.state.backend_client = BackendClient.from_settings(settings)

    yield

    logger.info("Shutting down %s", settings.app_name)
    if owns_client:
        await app.state.backend_client.close()
        app.state.backend_client = None


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
# Registered last so it wraps the gate and also counts redirects.
app.middleware("http")(enforce_access_gate)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(pages_router)
app.include_router(student_booking_router)
app.include_router(mentor_schedule_router)
app.include_router(scheduling_router)
app.include_router(admin_router)


@app.get("/")
async def landing_page() -> dict[str, object]:
    """Entry page: sign-in endpoint and probe links."""
    return {
        "app": settings.app_name,
        "sign_in": f"{settings.api_prefix}/auth/signin",
        "links": {
            "docs": "/docs",
            "health": "/health",
            "ready": "/ready",
            "metrics": "/metrics",
        },
    }


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "ok"}


@app.get("/ready")
async def readiness_check(request: Request) -> dict[str, str]:
    """Readiness probe endpoint with backend reachability check."""
    if not await request.app.state.backend_client.ping():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend is not reachable",
        )
    return {
        "status": "ready",
        "backend": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
