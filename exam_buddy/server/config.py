# server/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# .../exam_buddy
ROOT_DIR = Path(__file__).resolve().parent.parent

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_EXAM_IMPACT_MODEL = "google/gemini-3-flash-preview"
DEFAULT_STUDY_PLANNER_MODEL = "google/gemini-3-pro-preview"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_GATEWAY_URL
    exam_impact_model: str = DEFAULT_EXAM_IMPACT_MODEL
    study_planner_model: str = DEFAULT_STUDY_PLANNER_MODEL
    temperature: float = 0.7
    timeout_seconds: float = 60.0
    transport_retries: int = 0
    retry_backoff_seconds: float = 0.5
    log_level: str = "INFO"

    @property
    def key_prefix(self) -> str:
        if not self.api_key:
            return "(none)"
        return self.api_key[:8] + "..." if len(self.api_key) >= 8 else "(short key)"


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(
            "Server configuration error",
            detail=f"{name} must be a number, got {value!r}",
        )


def load_settings(load_env: bool = True) -> Settings:
    """
    Read settings from the environment.

    .env files are loaded from the project root and the working directory
    first; real environment variables win over both.
    """
    if load_env:
        load_dotenv(ROOT_DIR / ".env")
        load_dotenv()

    api_key = os.getenv("LLM_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")

    retries = _env_number("LLM_TRANSPORT_RETRIES", 0, int)
    if retries < 0:
        raise ConfigurationError(
            "Server configuration error",
            detail="LLM_TRANSPORT_RETRIES must not be negative",
        )

    return Settings(
        api_key=api_key or None,
        base_url=(os.getenv("LLM_GATEWAY_URL") or DEFAULT_GATEWAY_URL).rstrip("/"),
        exam_impact_model=os.getenv("EXAM_IMPACT_MODEL") or DEFAULT_EXAM_IMPACT_MODEL,
        study_planner_model=os.getenv("STUDY_PLANNER_MODEL")
        or DEFAULT_STUDY_PLANNER_MODEL,
        temperature=_env_number("LLM_TEMPERATURE", 0.7, float),
        timeout_seconds=_env_number("LLM_TIMEOUT_SECONDS", 60.0, float),
        transport_retries=retries,
        retry_backoff_seconds=_env_number("LLM_RETRY_BACKOFF_SECONDS", 0.5, float),
        log_level=(os.getenv("EXAM_BUDDY_LOG_LEVEL") or "INFO").upper(),
    )
