"""
Application Settings

Loaded from environment variables (and a project-level .env file).
"""
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    """Runtime configuration for the assessment engine and scan pipeline."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Inference service ───────────────────────────────────────────────
    inference_url: str = "http://localhost:54321/functions/v1/analyze-brain-scan"
    inference_api_key: Optional[str] = None
    inference_timeout_seconds: float = 60.0
    inference_include_prompt: bool = False

    # ── Assessment timing ───────────────────────────────────────────────
    stimulus_duration_ms: int = 5000
    auto_advance_delay_ms: int = 500

    # ── Speech capture ──────────────────────────────────────────────────
    speech_locale: str = "en-US"

    # ── Scoring ─────────────────────────────────────────────────────────
    category_weights: Dict[str, float] = Field(
        default_factory=lambda: {"memory": 1.0, "problem-solving": 1.0, "speech": 1.0}
    )

    # ── Service ─────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_file: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


settings = Settings()
