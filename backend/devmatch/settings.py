"""Settings for the DevMatch moderation console."""

from __future__ import annotations

from typing import Any, Optional, Tuple, Union

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


def _split_csv(value: Any) -> Tuple[str, ...]:
    if value in (None, ""):
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple, set)):
        return tuple(str(item).strip() for item in value if str(item).strip())
    return ()


class Settings(BaseSettings):
    # Remote report service (the platform REST API)
    report_service_url: str = _env_field("http://localhost:5000/api", "REPORT_SERVICE_URL", "API_URL")
    report_service_token: Optional[str] = _env_field(None, "REPORT_SERVICE_TOKEN")
    report_service_timeout_seconds: float = _env_field(10.0, "REPORT_SERVICE_TIMEOUT_SECONDS")
    report_page_size: int = _env_field(10, "REPORT_PAGE_SIZE")
    admin_roles: Union[str, Tuple[str, ...]] = _env_field(("admin",), "ADMIN_ROLES")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("devmatch-moderation", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development", "test")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("admin_roles", mode="before")
    def _split_admin_roles(cls, value):  # type: ignore[override]
        """Accept a comma-separated string or a sequence; roles compare lower-case."""
        return tuple(role.lower() for role in _split_csv(value))

    @field_validator("report_service_url", mode="after")
    def _strip_trailing_slash(cls, value: str) -> str:  # type: ignore[override]
        return value.rstrip("/")


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
