"""Application settings loaded from environment."""

from collections.abc import Sequence
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "MentorPortal"
    app_env: str = "development"
    debug: bool = False
    api_prefix: str = "/api"
    log_level: str = "INFO"

    backend_api_url: str = "http://localhost:5000/api"
    backend_timeout_seconds: float = Field(default=10.0, gt=0)

    token_cookie_name: str = "token"
    selected_role_cookie_name: str = "selectedRole"
    user_id_cookie_name: str = "userId"
    token_cookie_max_age_seconds: int = 60 * 60 * 24

    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"

    portal_timezone: str = "Asia/Kolkata"
    course_id: str = "67a9b3795cf0982adcc295d7"
    max_bookings: int = Field(default=105, ge=1)
    booking_lookahead_days: int = Field(default=7, ge=1)

    redis_url: str | None = None

    signin_rate_limit_window_seconds: int = 60
    signin_rate_limit_requests: int = 10
    signin_rate_limit_backend: Literal["memory", "redis"] = "memory"
    signin_rate_limit_trusted_proxy_ips: tuple[str, ...] = ("127.0.0.1", "::1")
    signin_rate_limit_allow_in_memory_in_production: bool = False

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() in {"production", "prod"}

    @field_validator("backend_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Keep base URL joinable with absolute endpoint paths."""
        return value.rstrip("/")

    @field_validator("signin_rate_limit_backend", mode="before")
    @classmethod
    def normalize_rate_limit_backend(cls, value: object) -> object:
        """Normalize backend token for case-insensitive env parsing."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("signin_rate_limit_trusted_proxy_ips", mode="before")
    @classmethod
    def parse_trusted_proxy_ips(cls, value: object) -> tuple[str, ...]:
        """Parse trusted proxy IPs from comma-separated env value."""
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        if isinstance(value, Sequence):
            return tuple(str(item).strip() for item in value if str(item).strip())
        raise TypeError(
            "SIGNIN_RATE_LIMIT_TRUSTED_PROXY_IPS must be a comma-separated string or list",
        )

    @model_validator(mode="after")
    def validate_security_for_environment(self) -> "Settings":
        """Block unsafe defaults in production-like environments."""
        if self.signin_rate_limit_backend == "redis" and not self.redis_url:
            raise ValueError("REDIS_URL must be set when SIGNIN_RATE_LIMIT_BACKEND=redis")

        if not self.is_production:
            return self

        if not self.backend_api_url.startswith("https://"):
            raise ValueError("BACKEND_API_URL must use https in production environment")

        if (
            self.signin_rate_limit_backend == "memory"
            and not self.signin_rate_limit_allow_in_memory_in_production
        ):
            raise ValueError(
                "SIGNIN_RATE_LIMIT_ALLOW_IN_MEMORY_IN_PRODUCTION must be true in production "
                "when using in-memory sign-in rate limiting",
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
