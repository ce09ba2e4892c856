from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://sdk-gateway-b85kv8d1.ue.gateway.dev"
DEFAULT_PLATFORM = "python"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    api_key: str | None = Field(default=None, alias="SHINARA_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="SHINARA_BASE_URL")
    platform: str = Field(default=DEFAULT_PLATFORM, alias="SHINARA_PLATFORM")
    http_timeout_seconds: float = Field(default=10.0, gt=0, alias="SHINARA_HTTP_TIMEOUT_SECONDS")

    store_url: str = Field(
        default="sqlite+aiosqlite:///shinara_sdk.db",
        alias="SHINARA_STORE_URL",
    )
    screen_resolution: str | None = Field(default=None, alias="SHINARA_SCREEN_RESOLUTION")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
