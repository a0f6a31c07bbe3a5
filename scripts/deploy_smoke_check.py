"""Post-deploy smoke checks for a running portal instance."""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.request

BASE_URL = os.environ.get("PORTAL_BASE_URL", "http://localhost:8000")


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


_opener = urllib.request.build_opener(_NoRedirect)


def request(
    path: str,
    *,
    method: str = "GET",
    body: dict[str, str] | None = None,
    expected: int = 200,
) -> tuple[bytes, dict[str, str]]:
    payload = None
    req_headers = {"Accept": "application/json"}
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        data=payload,
        method=method,
        headers=req_headers,
    )
    try:
        with _opener.open(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
            headers = dict(response.headers)
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        if exc.code != expected:
            body_text = exc.read().decode("utf-8", errors="ignore")
            raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc
        return exc.read(), dict(exc.headers)

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content, headers


def main() -> None:
    for endpoint in ["/", "/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    _, headers = request("/mentor/schedule", expected=307)
    if headers.get("location") != "/":
        raise RuntimeError(f"Gate redirected anonymous request to {headers.get('location')!r}")

    email = os.environ.get("SMOKE_EMAIL")
    password = os.environ.get("SMOKE_PASSWORD")
    if email and password:
        content, _ = request(
            "/api/auth/signin",
            method="POST",
            body={"email": email, "password": password},
            expected=200,
        )
        print(f"Signed in, next page: {json.loads(content)['redirect_to']}")

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
