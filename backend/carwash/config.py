# backend/carwash/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./carwash.db"
    redis_url: str = "redis://localhost:6379/0"

    # External identity provider
    identity_api_url: str = "http://localhost:9099"
    identity_api_key: str = ""
    identity_timeout_seconds: float = 5.0

    # SQLite: seconds a writer waits for the write lock
    sqlite_busy_timeout_seconds: float = 15.0

    # Slot grid (reference timezone is a fixed offset, no DST)
    open_time: str = "08:00"
    close_time: str = "17:00"
    slot_interval_minutes: int = 15
    utc_offset_minutes: int = 120
    default_active_bays: int = 1
    points_per_free_wash: int = 10

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path -> absolute, anchored at repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
