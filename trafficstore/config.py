"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DATABASE_URL: str = "sqlite:///./traffic.db"
    APP_NAME: str = "Interface Traffic Store"
    TOOL_VERSION: str = "1.0.0"
    DEFAULT_SERIES_LIMIT: int = 100
    MAX_SERIES_LIMIT: int = 1000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
