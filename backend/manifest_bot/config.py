"""Application settings and configuration helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration handed to pipeline components at construction."""

    # Media source (Twilio)
    twilio_sid: str = ""
    twilio_auth_token: str = ""
    media_timeout_seconds: float = 30.0

    # Enhancement
    enhance_target_width: int = 1600
    enhance_jpeg_quality: int = 90

    # Model
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_org_id: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    prompt_version: str = "v1"
    max_output_tokens: int = 800
    llm_timeout_seconds: float = 60.0
    llm_max_attempts: int = 4
    llm_retry_base_seconds: float = 1.0
    llm_retry_max_seconds: float = 16.0

    # User-facing messages
    error_detail_max_chars: int = 200


@dataclass(frozen=True)
class SheetConfig:
    sheet_id: str = ""
    sheet_range: str = "Hoja1!A:N"
    client_email: str = ""
    private_key: str = ""


class Settings:
    """Runtime configuration loaded from environment variables.

    Defaults are suitable for local development. Production should set
    explicit values via environment variables (Render dashboard or .env).
    """

    APP_NAME: str = "Manifiestos Bot"

    # OpenAI
    OPENAI_API_KEY: str
    OPENAI_MODEL: str
    OPENAI_ORG_ID: str
    OPENAI_BASE_URL: str
    LLM_PROMPT_VERSION: str
    LLM_MAX_OUTPUT_TOKENS: int
    LLM_TIMEOUT_SECONDS: float
    LLM_MAX_ATTEMPTS: int
    LLM_RETRY_BASE_SECONDS: float
    LLM_RETRY_MAX_SECONDS: float

    # Twilio media
    TWILIO_SID: str
    TWILIO_AUTH_TOKEN: str
    MEDIA_TIMEOUT_SECONDS: float

    # Enhancement
    ENHANCE_TARGET_WIDTH: int
    ENHANCE_JPEG_QUALITY: int

    # Google Sheets
    SHEET_ID: str
    SHEET_RANGE: str
    GS_CLIENT_EMAIL: str
    GS_PRIVATE_KEY: str

    # Misc
    ERROR_DETAIL_MAX_CHARS: int
    LOG_LEVEL: str
    PORT: int

    def __init__(self) -> None:
        # Load .env once (supports parent directories)
        load_dotenv(find_dotenv(), override=False)

        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.OPENAI_ORG_ID = os.getenv("OPENAI_ORG_ID", "")
        self.OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
        self.LLM_PROMPT_VERSION = os.getenv("LLM_PROMPT_VERSION", "v1")
        # Clamp to a reasonable range to avoid provider errors
        self.LLM_MAX_OUTPUT_TOKENS = max(256, min(4096, int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "800"))))
        self.LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
        self.LLM_MAX_ATTEMPTS = max(1, int(os.getenv("LLM_MAX_ATTEMPTS", "4")))
        self.LLM_RETRY_BASE_SECONDS = float(os.getenv("LLM_RETRY_BASE_SECONDS", "1.0"))
        self.LLM_RETRY_MAX_SECONDS = float(os.getenv("LLM_RETRY_MAX_SECONDS", "16"))

        self.TWILIO_SID = os.getenv("TWILIO_SID", "")
        self.TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
        self.MEDIA_TIMEOUT_SECONDS = float(os.getenv("MEDIA_TIMEOUT_SECONDS", "30"))

        self.ENHANCE_TARGET_WIDTH = int(os.getenv("ENHANCE_TARGET_WIDTH", "1600"))
        self.ENHANCE_JPEG_QUALITY = int(os.getenv("ENHANCE_JPEG_QUALITY", "90"))

        self.SHEET_ID = os.getenv("SHEET_ID", "")
        self.SHEET_RANGE = os.getenv("SHEET_RANGE", "Hoja1!A:N")
        self.GS_CLIENT_EMAIL = os.getenv("GS_CLIENT_EMAIL", "")
        # Render and most dashboards store the PEM with escaped newlines
        self.GS_PRIVATE_KEY = os.getenv("GS_PRIVATE_KEY", "").replace("\\n", "\n")

        self.ERROR_DETAIL_MAX_CHARS = int(os.getenv("ERROR_DETAIL_MAX_CHARS", "200"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.PORT = int(os.getenv("PORT", "3000"))

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            twilio_sid=self.TWILIO_SID,
            twilio_auth_token=self.TWILIO_AUTH_TOKEN,
            media_timeout_seconds=self.MEDIA_TIMEOUT_SECONDS,
            enhance_target_width=self.ENHANCE_TARGET_WIDTH,
            enhance_jpeg_quality=self.ENHANCE_JPEG_QUALITY,
            openai_api_key=self.OPENAI_API_KEY,
            openai_model=self.OPENAI_MODEL,
            openai_org_id=self.OPENAI_ORG_ID,
            openai_base_url=self.OPENAI_BASE_URL,
            prompt_version=self.LLM_PROMPT_VERSION,
            max_output_tokens=self.LLM_MAX_OUTPUT_TOKENS,
            llm_timeout_seconds=self.LLM_TIMEOUT_SECONDS,
            llm_max_attempts=self.LLM_MAX_ATTEMPTS,
            llm_retry_base_seconds=self.LLM_RETRY_BASE_SECONDS,
            llm_retry_max_seconds=self.LLM_RETRY_MAX_SECONDS,
            error_detail_max_chars=self.ERROR_DETAIL_MAX_CHARS,
        )

    def sheet_config(self) -> SheetConfig:
        return SheetConfig(
            sheet_id=self.SHEET_ID,
            sheet_range=self.SHEET_RANGE,
            client_email=self.GS_CLIENT_EMAIL,
            private_key=self.GS_PRIVATE_KEY,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
