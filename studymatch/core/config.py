from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from studymatch.core.version import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_NAME: str = "StudyMatch"
    APP_ENV: Literal["development", "production", "test"] = "production"

    # "memory" keeps everything in-process (single worker deployments and tests)
    STORE_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://redis:6379/0"
    # Maximum number of connections Redis client will open per process
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_KEY_PREFIX: str = "studymatch:"

    # Background recomputation of group profiles
    EVENT_WORKERS: int = 2
    EVENT_QUEUE_MAXSIZE: int = 10000

    FEED_PAGE_SIZE: int = 4
    FEED_CATEGORY_LIMIT: int = 20
    FEED_EVENT_WINDOW_DAYS: int = 14
    FEED_SESSION_WINDOW_DAYS: int = 30

    MATCH_TOP_LIMIT: int = 10


settings = Settings()

APP_VERSION = __version__
