from __future__ import annotations

from types import SimpleNamespace

import pytest
from starlette.requests import Request

from mentor_portal.core.rate_limit import InMemorySlidingWindowRateLimiter
from mentor_portal.modules.identity import rate_limit as identity_rate_limit
from mentor_portal.shared.exceptions import RateLimitException


def _make_request(
    *,
    client_ip: str = "10.0.0.1",
    x_forwarded_for: str | None = None,
) -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if x_forwarded_for is not None:
        headers.append((b"x-forwarded-for", x_forwarded_for.encode()))

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/auth/signin",
        "headers": headers,
        "client": (client_ip, 12345),
    }
    return Request(scope)


def _settings(requests: int, window: int = 60, proxies: tuple[str, ...] = ("127.0.0.1",)) -> SimpleNamespace:
    return SimpleNamespace(
        signin_rate_limit_window_seconds=window,
        signin_rate_limit_requests=requests,
        signin_rate_limit_trusted_proxy_ips=proxies,
    )


@pytest.mark.asyncio
async def test_signin_rate_limit_blocks_after_threshold(monkeypatch: pytest.MonkeyPatch) -> None:
    limiter = InMemorySlidingWindowRateLimiter(now_provider=lambda: 1000.0)
    monkeypatch.setattr(identity_rate_limit, "get_rate_limiter", lambda: limiter)
    monkeypatch.setattr(identity_rate_limit, "get_settings", lambda: _settings(requests=2))

    request = _make_request(client_ip="10.1.1.1")
    await identity_rate_limit.enforce_signin_rate_limit(request)
    await identity_rate_limit.enforce_signin_rate_limit(request)
    with pytest.raises(RateLimitException) as exc:
        await identity_rate_limit.enforce_signin_rate_limit(request)
    assert exc.value.status_code == 429


@pytest.mark.asyncio
async def test_signin_rate_limit_uses_forwarded_ip_from_trusted_proxy(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: dict[str, object] = {}

    class CapturingLimiter:
        async def acquire(self, key: str, *, max_requests: int, window_seconds: int) -> tuple[bool, int]:
            captured.update(key=key, max_requests=max_requests, window_seconds=window_seconds)
            return True, 0

    monkeypatch.setattr(identity_rate_limit, "get_rate_limiter", lambda: CapturingLimiter())
    monkeypatch.setattr(identity_rate_limit, "get_settings", lambda: _settings(requests=7, window=120))

    request = _make_request(client_ip="127.0.0.1", x_forwarded_for="2.2.2.2, 3.3.3.3")
    await identity_rate_limit.enforce_signin_rate_limit(request)

    assert captured == {"key": "signin:2.2.2.2", "max_requests": 7, "window_seconds": 120}


def test_forwarded_header_ignored_from_untrusted_client() -> None:
    request = _make_request(client_ip="8.8.8.8", x_forwarded_for="2.2.2.2")

    assert identity_rate_limit.resolve_client_ip(request, trusted_proxy_ips={"127.0.0.1"}) == "8.8.8.8"
