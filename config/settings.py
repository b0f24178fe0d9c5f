from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Offer history source: "http" = upstream REST API, "memory" = in-process store
    OFFERS_PROVIDER: Literal["http", "memory"] = "http"
    OFFERS_SEED_FILE: str | None = None  # JSON seed for the memory provider

    # Upstream offers/events REST API (defaults match the local dev backend)
    OFFERS_API_BASE_URL: str = "http://localhost:5000/api"
    OFFERS_API_TIMEOUT_SECONDS: float = 5.0

    # Price suggestions
    RECENT_OFFERS_LIMIT: int = 50
    SUGGESTION_CACHE_TTL_SECONDS: int = 30  # 0 disables the keyed cache
    SUGGESTION_CACHE_MAX_ENTRIES: int = 1024

    # App
    APP_NAME: str = "Ticket Resale Pricing"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
