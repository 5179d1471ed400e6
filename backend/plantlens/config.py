"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

DEFAULT_ANALYSIS_PROMPT = (
    "Analyze this plant image and provide details about its species, health, "
    "and care recommendations."
)


class Settings(BaseSettings):
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-pro"
    ANALYSIS_PROMPT: str = DEFAULT_ANALYSIS_PROMPT
    MOCK_MODELS: bool = False

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    UPLOAD_DIR: str = "./upload"
    REPORTS_DIR: str = "./reports"
    PUBLIC_DIR: str = "./public"

    MAX_BODY_BYTES: int = 10 * 1024 * 1024
    REPORT_PAGE_COMPRESSION: bool = False

    CORS_ORIGINS: list[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()


def get_settings() -> Settings:
    return settings
