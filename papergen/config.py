"""
Configuration settings for the PaperGen backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Gemini Configuration
    GEMINI_API_KEY: str = ""  # fallback when a request carries no X-Api-Key
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TIMEOUT: int = 180  # full papers take a while

    # Retry Configuration
    # One initial attempt plus this many retries
    GENERATION_MAX_RETRIES: int = 3
    # First backoff delay; doubles on every retry (1s, 2s, 4s)
    GENERATION_BACKOFF_SECONDS: float = 1.0

    # Upload Configuration
    MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20 MB

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
