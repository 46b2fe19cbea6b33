import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Classifier backend: "mock" (keywords + random draw) or "gemini"
    ANALYSIS_BACKEND: str = "mock"
    # Simulated model latency for the mock backend
    MOCK_LATENCY_SEC: float = 0.0

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_VISION_MODEL: str = "gemini-2.5-pro"
    GEMINI_TEXT_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT: float = 60.0
    # Inline request payload ceiling (after base64) accepted by generateContent
    GEMINI_MAX_INLINE_BYTES: int = 20 * 1024 * 1024

    # Uploads
    UPLOAD_DIR: str = os.getenv("GUARDIAN_TMP", "./.tmp/uploads")
    UPLOAD_MAX_AGE_SEC: float = 24 * 3600
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024
    MAX_AUDIO_BYTES: int = 10 * 1024 * 1024
    MAX_VIDEO_BYTES: int = 50 * 1024 * 1024
    MAX_TEXT_CHARS: int = 10_000

    # CORS
    FRONTEND_URL: str = "https://ai-personal-safety-guardian.vercel.app"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # General
    ENV: str = os.getenv("ENV", "development")
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> List[str]:
        origins = list(self.CORS_ORIGINS)
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Ensure .env is loaded once
    load_dotenv(override=False)
    return Settings()
