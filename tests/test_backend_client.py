from __future__ import annotations

import httpx
import pytest

from mentor_portal.core.backend import BackendClient
from mentor_portal.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    UpstreamUnavailableException,
)
from tests.conftest import FakeBackendTransport


@pytest.mark.asyncio
async def test_requests_carry_bearer_token_and_query(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("GET", "/slots", [{"_id": "s1"}])

    slots = await backend_client.list_slots("tok", "m1", "Open")

    request = fake_backend.requests[-1]
    assert slots == [{"_id": "s1"}]
    assert request.headers["authorization"] == "Bearer tok"
    assert request.url.params["mentor"] == "m1"
    assert request.url.params["status"] == "Open"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "exception_class"),
    [
        (400, BusinessRuleException),
        (401, UnauthorizedException),
        (403, UnauthorizedException),
        (404, NotFoundException),
        (409, ConflictException),
        (422, BusinessRuleException),
    ],
)
async def test_client_errors_map_to_domain_exceptions(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
    status_code: int,
    exception_class: type[Exception],
) -> None:
    fake_backend.add("PUT", "/bookings/b1", httpx.Response(status_code, json={"error": "Slot already taken"}))

    with pytest.raises(exception_class) as exc:
        await backend_client.update_booking("tok", "b1", {"status": "Cancellation Requested"})
    assert exc.value.message == "Slot already taken"


@pytest.mark.asyncio
async def test_server_errors_become_upstream_unavailable(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("GET", "/get-user-status", httpx.Response(500, text="oops"))

    with pytest.raises(UpstreamUnavailableException) as exc:
        await backend_client.get_user_status("tok")
    assert exc.value.upstream_status == 500


@pytest.mark.asyncio
async def test_transport_errors_become_upstream_unavailable() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = BackendClient(
        httpx.AsyncClient(base_url="http://backend.test/api", transport=httpx.MockTransport(_refuse)),
    )

    with pytest.raises(UpstreamUnavailableException):
        await client.list_bookings("tok", "u1")
    assert await client.ping() is False


@pytest.mark.asyncio
async def test_user_status_must_be_an_object(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("GET", "/get-user-status", ["not", "an", "object"])

    with pytest.raises(UpstreamUnavailableException):
        await backend_client.get_user_status("tok")


@pytest.mark.asyncio
async def test_meeting_envelopes_are_unwrapped(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("GET", "/meetings", {"meetings": [{"title": "Sync"}]})
    fake_backend.add("POST", "/meetings", {"meeting": {"title": "Kickoff"}})

    assert await backend_client.list_meetings("tok") == [{"title": "Sync"}]
    assert await backend_client.create_meeting("tok", {"title": "Kickoff"}) == {"title": "Kickoff"}


@pytest.mark.asyncio
async def test_empty_success_body_returns_none(
    backend_client: BackendClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("DELETE", "/users/u9", httpx.Response(204))

    assert await backend_client.delete_user("tok", "u9") is None
    assert fake_backend.requests[-1].url.path == "/api/users/u9"
