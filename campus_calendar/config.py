"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./campus_calendar.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Wall-clock zone for date+hour input, recurrence stepping and all-day detection
    CALENDAR_TIMEZONE: str = "UTC"

    MAX_RECURRENCE_INSTANCES: int = 1000
    DEFAULT_PAGE_LIMIT: int = 100
    MAX_PAGE_LIMIT: int = 2000

    # Poster image understanding (OpenAI-compatible endpoint)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    VISION_MODEL: str = "qwen/qwen-vl-plus"
    POSTERS_DIR: str = "./storage/posters"

    class Config:
        env_file = ".env"


settings = Settings()
