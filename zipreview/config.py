"""Application configuration loaded from environment variables.

Uses ``pydantic-settings`` for automatic env-var loading, type coercion,
and ``.env`` file support.  Nothing is strictly required: without an LLM
credential the heuristic ``/analyze`` endpoint still works and ``/review``
answers 503.
"""

VERSION = "0.1.0"

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Default model per text-generation provider.
_DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-1.5-flash",
    "anthropic": "claude-haiku-4-5",
}


class Settings(BaseSettings):
    """Application settings -- sourced from environment / ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- server --
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    FRONTEND_URL: str = "http://localhost:5173"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # -- request-scoped storage --
    UPLOAD_DIR: str = "uploads"
    EXTRACT_DIR: str = "extracted"
    MAX_UPLOAD_BYTES: int = Field(default=50 * 1024 * 1024, ge=1)  # 50 MiB

    # -- heuristic scan --
    SAMPLE_LIMIT: int = Field(default=20, ge=1)
    LONG_LINE_THRESHOLD: int = Field(default=120, ge=1)
    # Extra directory names skipped on top of DEFAULT_EXCLUDED_DIRS.
    EXTRA_EXCLUDED_DIRS: list[str] = Field(default_factory=list)

    # -------------------------------------------------------------------------
    # Text generation (per-file review).
    #
    #   "gemini"    -- Google Generative Language API (default)
    #   "anthropic" -- Anthropic Messages API
    #
    # LLM_MODEL left blank resolves to the provider default below.
    # -------------------------------------------------------------------------
    LLM_PROVIDER: Literal["gemini", "anthropic"] = "gemini"
    LLM_MODEL: str = ""
    LLM_MAX_TOKENS: int = 2048
    GEMINI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    REVIEW_MAX_FILES: int = Field(default=20, ge=1)

    @field_validator("LLM_PROVIDER", mode="before")
    @classmethod
    def _normalise_provider(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or "gemini"
        return value

    @model_validator(mode="after")
    def _resolve_model(self) -> "Settings":
        """Fill in the provider's default model when none is set."""
        if not self.LLM_MODEL:
            self.LLM_MODEL = _DEFAULT_MODELS.get(self.LLM_PROVIDER, "")
        return self

    @property
    def llm_api_key(self) -> str:
        """Return the credential for the configured provider (may be blank)."""
        if self.LLM_PROVIDER == "anthropic":
            return self.ANTHROPIC_API_KEY
        return self.GEMINI_API_KEY


settings = Settings()
