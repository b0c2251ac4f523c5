"""
Configuration settings for the LawWise backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Gemini Configuration
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1"
    GEMINI_MODEL: str = "gemini-pro"
    GEMINI_TIMEOUT: int = 60  # seconds per completion call

    # Generation Configuration
    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_TOP_K: int = 40
    GENERATION_TOP_P: float = 0.95
    ANALYSIS_MAX_OUTPUT_TOKENS: int = 800
    CHAT_MAX_OUTPUT_TOKENS: int = 500

    # Documents longer than this are cut before being embedded in the prompt
    MAX_DOCUMENT_CHARS: int = 10000

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    # OCR Configuration
    TESSERACT_CMD: str = "/usr/bin/tesseract"

    # Upload Configuration
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB
    SUPPORTED_FILE_TYPES: List[str] = [
        ".pdf", ".docx", ".doc", ".txt", ".png", ".jpg", ".jpeg",
    ]

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
