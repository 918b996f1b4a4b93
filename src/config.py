from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the gateway, read from the environment or `.env`."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "IP Geolocation Gateway"
    LOG_LEVEL: str = "INFO"  # DEBUG, WARNING, ERROR
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Key-value store
    STORE_BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT_SECONDS: float = 5.0

    # Upstream provider
    UPSTREAM_BASE_URL: str = "https://api.pearktrue.cn"
    UPSTREAM_TIMEOUT_SECONDS: float = 5.0
    UPSTREAM_SOURCE_LABEL: str = "https://api.pearktrue.cn/"

    CACHE_TTL_SECONDS: int = Field(default=300, gt=0)  # 5 minutes
    RATE_LIMIT_REQUESTS: int = Field(default=60, gt=0)  # requests per window
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=60, gt=0)
    BATCH_MAX_SIZE: int = Field(default=10, gt=0)


settings = Settings()
