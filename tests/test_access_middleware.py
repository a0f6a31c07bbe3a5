from __future__ import annotations

import httpx
from fastapi.testclient import TestClient
from jose import jwt

from tests.conftest import FakeBackendTransport


def _token() -> str:
    return jwt.encode({"id": "m1"}, "test-secret", algorithm="HS256")


def test_gated_page_without_cookie_redirects_to_entry(portal_client: TestClient) -> None:
    response = portal_client.get("/mentor/schedule")

    assert response.status_code == 307
    assert response.headers["location"] == "/"


def test_public_probe_needs_no_cookie(portal_client: TestClient) -> None:
    response = portal_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_multi_role_user_is_sent_to_role_selection(
    portal_client: TestClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add(
        "GET",
        "/get-user-status",
        {"_id": "m1", "name": "Ravi", "email": "ravi@example.com", "status": "ACTIVE", "roles": ["ADMIN", "MENTOR"]},
    )
    portal_client.cookies.set("token", _token())

    response = portal_client.get("/mentor/schedule")

    assert response.status_code == 307
    assert response.headers["location"] == "/select-role"
    assert fake_backend.requests[0].headers["authorization"] == f"Bearer {_token()}"


def test_upstream_outage_redirects_to_entry(
    portal_client: TestClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add("GET", "/get-user-status", httpx.Response(503, json={"error": "maintenance"}))
    portal_client.cookies.set("token", _token())

    response = portal_client.get("/student/slot-booking")

    assert response.status_code == 307
    assert response.headers["location"] == "/"


def test_allowed_request_reaches_the_page(
    portal_client: TestClient,
    fake_backend: FakeBackendTransport,
) -> None:
    fake_backend.add(
        "GET",
        "/get-user-status",
        {"_id": "m1", "name": "Ravi", "email": "ravi@example.com", "status": "ACTIVE", "roles": ["MENTOR"]},
    )
    fake_backend.add("GET", "/bookings", [])
    portal_client.cookies.set("token", _token())

    response = portal_client.get("/mentor/schedule", params={"tab": "all"})

    assert response.status_code == 200
    assert response.json() == {"tab": "all", "items": [], "total": 0}
    assert fake_backend.requests[-1].url.params["user"] == "m1"


def test_gate_decisions_are_counted(portal_client: TestClient) -> None:
    portal_client.get("/admin/manage-users")

    metrics = portal_client.get("/metrics")

    assert 'mentor_portal_access_gate_decisions_total{action="redirect",reason="credential_missing"}' in metrics.text
