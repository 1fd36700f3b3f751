"""Configuration management for the backend."""
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_ALLOWED_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


class Settings(BaseSettings):
    """Application settings."""

    # AI service (OpenAI-compatible endpoint, Gemini by default)
    # An empty key switches every AI call to the built-in mock payloads.
    api_key: str = ""
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    ai_model: str = "gemini-2.5-flash"
    mock_delay_seconds: float = 2.0

    # Uploads
    max_upload_mb: int = 10

    # Server
    port: int = 8000
    host: str = "0.0.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    # CORS - can be set via environment variable (comma-separated) or defaults to localhost
    allowed_origins: Annotated[List[str], NoDecode] = DEFAULT_ALLOWED_ORIGINS

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            origins = [origin.strip() for origin in value.split(",") if origin.strip()]
            return origins or list(DEFAULT_ALLOWED_ORIGINS)
        return value

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
