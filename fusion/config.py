"""Application settings.

Read from FUSION_* environment variables or a .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FusionSettings(BaseSettings):
    # Platform REST API used by the HTTP fetchers
    api_base_url: str = "http://localhost:8080"
    api_token: str | None = None
    request_timeout: float = Field(default=30.0, gt=0)  # seconds, per HTTP request
    request_retries: int = Field(default=2, ge=0)

    # Resolver defaults
    default_timeout_ms: float = Field(default=30000, gt=0)
    cache_enabled: bool = True
    cache_ttl_seconds: int = Field(default=300, gt=0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="FUSION_",  # FUSION_API_BASE_URL, FUSION_CACHE_TTL_SECONDS, ...
    )


@lru_cache(maxsize=1)
def get_settings() -> FusionSettings:
    return FusionSettings()
