from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from mentor_portal.core.backend import BackendClient

BACKEND_BASE_URL = "http://backend.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackendTransport:
    """Routes ``(method, path)`` pairs to canned backend responses."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler | httpx.Response | Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: Handler | httpx.Response | Any) -> None:
        self.routes[(method.upper(), f"/api{path}")] = response

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, httpx.Response):
            return route
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)


@pytest.fixture
def fake_backend() -> FakeBackendTransport:
    return FakeBackendTransport()


@pytest.fixture
def backend_client(fake_backend: FakeBackendTransport) -> BackendClient:
    return BackendClient(
        httpx.AsyncClient(base_url=BACKEND_BASE_URL, transport=httpx.MockTransport(fake_backend)),
    )


@pytest.fixture
def portal_client(backend_client: BackendClient) -> Iterator[TestClient]:
    from mentor_portal.main import app

    app.state.backend_client = backend_client
    with TestClient(app, follow_redirects=False) as client:
        yield client
    app.state.backend_client = None
