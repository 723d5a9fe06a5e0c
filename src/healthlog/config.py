from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HEALTHLOG_",
        case_sensitive=False,
    )

    # App
    env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Primary store (user-entered logs)
    db_url: str = "sqlite+aiosqlite:///./healthlog.db"

    # Device store (fitness-tracker sync, read-only). Empty = not connected.
    device_db_url: str = ""

    # IANA zone for day boundaries; empty uses the host's local time
    timezone: str = ""

    # Listing cache, 0 disables it
    cache_ttl_seconds: int = 0

    # Pagination
    log_page_size: int = 10
    log_page_size_max: int = 100
    sleep_page_size: int = 25
    sleep_page_size_max: int = 500


def get_settings() -> Settings:
    return Settings()
