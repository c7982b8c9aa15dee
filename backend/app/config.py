# Dynamic Report Generator - Configuration
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Dynamic Report Generator"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # File intake
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: set = {"csv", "xls", "xlsx", "json"}
    MAX_FILES_PER_REQUEST: int = 10

    # Report generation
    CLASSIFIER_SAMPLE_ROWS: int = 5
    REPORT_MAX_WORKERS: int = 1  # >1 fans files out over a thread pool

    # CORS
    CORS_ORIGINS: list = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


settings = get_settings()
