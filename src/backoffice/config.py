"""Back office configuration.

Values come from the environment (prefix ``BACKOFFICE_``) or a local ``.env``
file. Defaults are suitable for development and tests.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BACKOFFICE_",
        env_file=".env",
        extra="ignore",
    )

    environment: str = "development"
    log_level: str | None = None
    log_dir: str | None = None

    # Stock strictly below this count is reported as "low"
    low_stock_threshold: int = 5
    # Calendar-day filters are evaluated in this timezone
    local_timezone: str = "UTC"
    batch_max_workers: int = 1

    order_store_adapter: str = "memory"
    stock_adapter: str = "memory"
    export_adapter: str = "csv"
    notifier_adapter: str = "fake"

    @field_validator("low_stock_threshold")
    @classmethod
    def threshold_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("low_stock_threshold must be >= 0")
        return v

    @field_validator("batch_max_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError("batch_max_workers must be >= 1")
        return v

    @field_validator("local_timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.local_timezone)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
