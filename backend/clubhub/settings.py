"""Settings for the club registration backend with sync and observability configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    # Remote spreadsheet-backed endpoint; empty disables the remote mirror.
    sync_endpoint_url: str = _env_field("", "SYNC_ENDPOINT_URL", "API_URL")
    sync_debounce_seconds: float = _env_field(2.0, "SYNC_DEBOUNCE_SECONDS")
    sync_timeout_seconds: float = _env_field(10.0, "SYNC_TIMEOUT_SECONDS")
    # Backoff ceiling for silent retries after failed pushes
    sync_retry_max_seconds: float = _env_field(60.0, "SYNC_RETRY_MAX_SECONDS")
    local_cache_dir: Path = _env_field(Path("var/cache"), "LOCAL_CACHE_DIR")
    local_cache_key: str = _env_field("nw_club_reg_v1", "LOCAL_CACHE_KEY", "STORAGE_KEY")

    admin_token: str = _env_field("admin1234", "ADMIN_TOKEN", "ADMIN_PASSWORD")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("clubhub-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    cors_allow_origins: Optional[tuple[str, ...]] = _env_field((), "CORS_ALLOW_ORIGINS")

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    @property
    def local_cache_path(self) -> Path:
        return Path(self.local_cache_dir) / f"{self.local_cache_key}.json"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.sync_endpoint_url.strip())

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("cors_allow_origins", mode="before")
    def _split_cors(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        return ()

    @field_validator("obs_log_level", mode="after")
    def _normalise_level(cls, value: str) -> str:  # type: ignore[override]
        return value.upper()


settings = Settings()
