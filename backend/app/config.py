from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "Settings",
    "get_settings",
]


class Settings(BaseSettings):
    """Runtime settings read from the environment.

    Field names match the upper-case variables case-insensitively (``DB_HOST``
    sets ``db_host``). Database settings feed ``db.core.get_conn``; the
    calendar settings bound the occurrence projection.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    db_host: str = "db"
    db_user: str = "appuser"
    db_password: str = "apppass"
    db_name: Optional[str] = None
    db_connect_timeout: int = 5
    db_read_timeout: int = 10
    db_write_timeout: int = 10

    calendar_horizon_months: int = Field(default=3, ge=1)
    calendar_max_events_per_schedule: int = Field(default=20, ge=1)
    recent_logs_limit: int = Field(default=10, ge=1)
    user_data_log_path: str = "inputs.json"

    cors_origins: str = Field(default="", description="Comma separated allowed origins")
    log_level: str = "INFO"
    test_mode: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @model_validator(mode="after")
    def default_db_name(self) -> "Settings":
        # Auto-isolate tests: when TEST_MODE=1 and DB_NAME is not explicitly set,
        # default to plantcare_test.
        if not self.db_name:
            self.db_name = "plantcare_test" if self.test_mode else "plantcare"
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings; tests call ``get_settings.cache_clear()`` after changing env."""
    return Settings()
