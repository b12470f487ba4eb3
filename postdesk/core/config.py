from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str = "sqlite+aiosqlite:///database.db"
    POOL_SIZE: int = 5
    # Seconds a call waits for a free pooled connection
    POOL_TIMEOUT: float = 30.0

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    API_PREFIX: str = ""
    CORS_ORIGINS: List[str] = ["*"]

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    PROJECT_NAME: str = "postdesk"
    PROJECT_INFO: str = "Post storage and retrieval over HTTP"
    PROJECT_VERSION: str = "1.0.0"


settings = Settings()
