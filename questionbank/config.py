"""Application configuration module."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Runtime environment; stack traces are only exposed outside production
    ENV: str = "development"

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./questionbank.db"
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_CREATE_TABLES: bool = True

    # "sql" uses DATABASE_URL, "memory" keeps questions in process memory
    STORAGE_BACKEND: str = "sql"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: str = ""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Question Bank API"
    CORS_ORIGINS: List[str] = ["*"]

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False
    # Log uncaught process-level errors and send SIGTERM to the server
    EXIT_ON_CRASH: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


# Create global settings instance
settings = Settings()
