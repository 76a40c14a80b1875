from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_APP_MODES = {"development", "production"}


class Settings(BaseSettings):
    app_name: str = "Drift and Sip Orders Service"
    app_mode: str = "development"

    database_url: str = Field(
        default="sqlite+pysqlite:///./drift_and_sip.db",
        validation_alias="DRIFTSIP_DATABASE_URL",
    )
    testing: bool = Field(default=False, validation_alias="DRIFTSIP_TESTING")
    auto_create_schema: bool = True
    require_migrations: bool = False

    api_prefix: str = "/api"
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    host: str = "0.0.0.0"
    port: int = 5000
    port_retry_attempts: int = Field(default=10, ge=1)

    archive_scheduler_enabled: bool = Field(
        default=True,
        validation_alias="DRIFTSIP_ARCHIVE_SCHEDULER_ENABLED",
    )
    archive_run_hour_utc: int = Field(default=0, ge=0, le=23)
    archive_after_hours: int = Field(default=24, ge=1)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("app_mode")
    @classmethod
    def validate_app_mode(cls, value: str) -> str:
        mode = value.lower().strip()
        if mode not in ALLOWED_APP_MODES:
            allowed = ", ".join(sorted(ALLOWED_APP_MODES))
            raise ValueError(f"APP_MODE must be one of: {allowed}")
        return mode

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, value: str) -> str:
        prefix = value.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = f"/{prefix}"
        return prefix

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper().strip()


settings = Settings()


def allowed_origins() -> list[str]:
    return [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]


def is_production_mode() -> bool:
    return settings.app_mode == "production"


def ensure_runtime_settings() -> None:
    """Fail fast when a non-test runtime is configured to lose data."""
    if not settings.testing and _is_sqlite_memory_url(settings.database_url):
        raise RuntimeError(
            "DRIFTSIP_DATABASE_URL must not be an in-memory SQLite database "
            "when DRIFTSIP_TESTING is false"
        )
    if not settings.testing and is_production_mode() and settings.auto_create_schema:
        raise RuntimeError("AUTO_CREATE_SCHEMA must be disabled in APP_MODE=production")


def _is_sqlite_memory_url(database_url: str) -> bool:
    value = database_url.strip().lower()
    return value.startswith("sqlite") and ":memory:" in value
