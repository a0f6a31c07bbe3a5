"""HTTP client for the external mentorship backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import Request

from mentor_portal.core.config import Settings
from mentor_portal.shared.exceptions import (
    AppException,
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    UpstreamUnavailableException,
)

logger = logging.getLogger(__name__)

_STATUS_EXCEPTIONS: dict[int, type[AppException]] = {
    400: BusinessRuleException,
    401: UnauthorizedException,
    403: UnauthorizedException,
    404: NotFoundException,
    409: ConflictException,
    422: BusinessRuleException,
}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Backend responded with status {response.status_code}"


class BackendClient:
    """Thin async wrapper over the backend REST API.

    Every call is a single request with no retry. Transport failures and
    unexpected statuses surface as ``UpstreamUnavailableException``; client
    errors map onto the matching domain exception.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> BackendClient:
        return cls(
            httpx.AsyncClient(
                base_url=settings.backend_api_url,
                timeout=settings.backend_timeout_seconds,
                headers={"Accept": "application/json"},
            ),
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            response = await self._http.request(
                method,
                path.lstrip("/"),
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise UpstreamUnavailableException("Backend is unreachable") from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise UpstreamUnavailableException(
                    "Backend returned a malformed payload",
                    upstream_status=response.status_code,
                ) from exc

        exception_class = _STATUS_EXCEPTIONS.get(response.status_code)
        if exception_class is not None:
            raise exception_class(_error_message(response))

        logger.warning("Backend %s %s responded %s", method, path, response.status_code)
        raise UpstreamUnavailableException(
            _error_message(response),
            upstream_status=response.status_code,
        )

    async def ping(self) -> bool:
        """Return True if the backend answers at all."""
        try:
            await self._http.get("")
        except httpx.HTTPError:
            return False
        return True

    async def get_user_status(self, token: str) -> dict[str, Any]:
        payload = await self._request("GET", "/get-user-status", token=token)
        if not isinstance(payload, dict):
            raise UpstreamUnavailableException("User status payload is not an object")
        return payload

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/signin",
            json={"email": email, "password": password},
        )

    async def list_bookings(self, token: str, user_id: str) -> list[dict[str, Any]]:
        return await self._request("GET", "/bookings", token=token, params={"user": user_id}) or []

    async def create_booking(self, token: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        return await self._request("POST", "/bookings", token=token, json=payload)

    async def update_booking(
        self,
        token: str,
        booking_id: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._request("PUT", f"/bookings/{booking_id}", token=token, json=payload)

    async def respond_to_booking(self, token: str, booking_id: str, response: str) -> Any:
        return await self._request(
            "PUT",
            f"/bookings/{booking_id}/response",
            token=token,
            json={"response": response},
        )

    async def list_slots(
        self,
        token: str,
        mentor_id: str,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"mentor": mentor_id}
        if status is not None:
            params["status"] = status
        return await self._request("GET", "/slots", token=token, params=params) or []

    async def create_slots(
        self,
        token: str,
        mentor_id: str,
        slots: list[dict[str, Any]],
    ) -> Any:
        return await self._request("POST", f"/mentors/{mentor_id}/slots", token=token, json=slots)

    async def get_course(self, token: str, course_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/courses/{course_id}", token=token)

    async def list_users(
        self,
        token: str,
        ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        params = {"ids": ",".join(ids)} if ids else None
        return await self._request("GET", "/users", token=token, params=params) or []

    async def update_user(
        self,
        token: str,
        user_id: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._request("PUT", f"/users/{user_id}", token=token, json=payload)

    async def delete_user(self, token: str, user_id: str) -> None:
        await self._request("DELETE", f"/users/{user_id}", token=token)

    async def list_meetings(self, token: str) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/meetings", token=token)
        if isinstance(payload, dict):
            return list(payload.get("meetings") or [])
        return list(payload or [])

    async def create_meeting(self, token: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        created = await self._request("POST", "/meetings", token=token, json=payload)
        if isinstance(created, dict) and isinstance(created.get("meeting"), dict):
            return created["meeting"]
        return created

    async def get_session_policy(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/admin/session-policy", token=token)

    async def update_session_policy(self, token: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/admin/session-policy", token=token, json=payload)


def get_backend_client(request: Request) -> BackendClient:
    """FastAPI dependency returning the app-scoped backend client."""
    return request.app.state.backend_client
