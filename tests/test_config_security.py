from __future__ import annotations

import pytest
from pydantic import ValidationError

from mentor_portal.core.config import Settings


def test_plain_http_backend_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", backend_api_url="http://localhost:5000/api/")
    assert settings.backend_api_url == "http://localhost:5000/api"
    assert settings.is_production is False


def test_plain_http_backend_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            app_env="production",
            backend_api_url="http://backend.internal/api",
            signin_rate_limit_allow_in_memory_in_production=True,
        )


def test_in_memory_rate_limiter_requires_explicit_ack_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", backend_api_url="https://backend.example.com/api")


def test_https_backend_allowed_in_production_with_explicit_ack() -> None:
    settings = Settings(
        _env_file=None,
        app_env="prod",
        backend_api_url="https://backend.example.com/api",
        signin_rate_limit_allow_in_memory_in_production=True,
    )
    assert settings.is_production is True


def test_redis_backend_requires_url() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, signin_rate_limit_backend="REDIS")

    settings = Settings(
        _env_file=None,
        signin_rate_limit_backend=" Redis ",
        redis_url="redis://redis:6379/0",
    )
    assert settings.signin_rate_limit_backend == "redis"


def test_trusted_proxy_ips_parse_from_comma_separated_value() -> None:
    settings = Settings(_env_file=None, signin_rate_limit_trusted_proxy_ips="10.0.0.1, 10.0.0.2,")
    assert settings.signin_rate_limit_trusted_proxy_ips == ("10.0.0.1", "10.0.0.2")


def test_portal_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.portal_timezone == "Asia/Kolkata"
    assert settings.max_bookings == 105
    assert settings.token_cookie_name == "token"
    assert settings.selected_role_cookie_name == "selectedRole"
