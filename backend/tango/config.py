"""Application configuration."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel


StorageBackend = Literal["memory", "cosmos"]


class AppSettings(BaseModel):
    """Application settings loaded from environment variables."""

    storage_backend: StorageBackend = "memory"  # "memory" (local) or "cosmos" (cloud)
    settings_cache_ttl_seconds: int = 60  # QuizSettings cache in the cloud adapter
    default_timezone: str = "UTC"  # Used when a request sends no X-Timezone header
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    @property
    def uses_cosmos(self) -> bool:
        return self.storage_backend == "cosmos"


@lru_cache()
def get_app_settings() -> AppSettings:
    """Get cached application settings from environment variables."""
    backend = os.getenv("STORAGE_BACKEND", "memory").strip().lower()
    if backend not in ("memory", "cosmos"):
        raise ValueError(f"STORAGE_BACKEND must be 'memory' or 'cosmos', got {backend!r}")

    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    return AppSettings(
        storage_backend=backend,
        settings_cache_ttl_seconds=int(os.getenv("SETTINGS_CACHE_TTL_SECONDS", "60")),
        default_timezone=os.getenv("DEFAULT_TIMEZONE", "UTC"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
