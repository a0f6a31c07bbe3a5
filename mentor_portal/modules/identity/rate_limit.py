"""Rate-limit dependency for the sign-in proxy."""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import Request

from mentor_portal.core.config import get_settings
from mentor_portal.core.rate_limit import get_rate_limiter
from mentor_portal.shared.exceptions import RateLimitException


def _trusted_proxy_ips(raw_value: object) -> set[str]:
    if raw_value is None:
        return set()
    if isinstance(raw_value, str):
        values: Iterable[object] = raw_value.split(",")
    elif isinstance(raw_value, tuple | list | set | frozenset):
        values = raw_value
    else:
        return set()
    return {str(value).strip() for value in values if str(value).strip()}


def resolve_client_ip(request: Request, *, trusted_proxy_ips: set[str]) -> str:
    """Client address, honouring X-Forwarded-For only from trusted proxies."""
    client_ip = request.client.host if request.client and request.client.host else "unknown"

    forwarded_for = request.headers.get("x-forwarded-for")
    if not forwarded_for or client_ip not in trusted_proxy_ips:
        return client_ip
    return forwarded_for.split(",")[0].strip() or client_ip


async def enforce_signin_rate_limit(request: Request) -> None:
    """Apply rate limit for the sign-in endpoint."""
    settings = get_settings()
    client_ip = resolve_client_ip(
        request,
        trusted_proxy_ips=_trusted_proxy_ips(settings.signin_rate_limit_trusted_proxy_ips),
    )
    allowed, retry_after = await get_rate_limiter().acquire(
        f"signin:{client_ip}",
        max_requests=settings.signin_rate_limit_requests,
        window_seconds=settings.signin_rate_limit_window_seconds,
    )
    if not allowed:
        raise RateLimitException(
            f"Too many sign-in attempts. Try again in {retry_after} second(s).",
        )
