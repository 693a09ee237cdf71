"""
RICE Prioritizer Configuration Module
=====================================

Configuration of the outer layers (LLM rationale, API, logging) from
environment variables. Supports both .env files and system environment
variables. The scoring engine itself takes no configuration from here:
its thresholds are frozen in `ricerank.scoring.scoring_config`.

Environment Variables:
    RICE_LLM_ENABLED: Generate AI rationale (default: true)
    RICE_LLM_PROVIDER: anthropic|openai (default: auto-detect from keys)
    RICE_LLM_MODEL: Model name override (default: provider default)
    RICE_LLM_TEMPERATURE: Sampling temperature (default: 0.2)
    RICE_LLM_MAX_TOKENS: Completion budget (default: 2048)
    ANTHROPIC_API_KEY / OPENAI_API_KEY / GPT_API_KEY: provider keys

    CORS_ORIGINS: Extra allowed origins, comma-separated

    LOG_LEVEL: Root log level (default: INFO)
    LOG_JSON: JSON structured logs (default: false)
    LOG_FILE: Optional log file path (rotated)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


# Load environment variables from .env at the project root if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a float, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def get_env_list(key: str) -> List[str]:
    """Get a comma-separated environment variable as a list."""
    value = os.getenv(key, "")
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class LLMConfig:
    """Generated-rationale provider configuration."""

    enabled: bool = field(default_factory=lambda: get_env_bool("RICE_LLM_ENABLED", True))
    provider: Optional[str] = field(default_factory=lambda: get_env("RICE_LLM_PROVIDER"))
    model: Optional[str] = field(default_factory=lambda: get_env("RICE_LLM_MODEL"))
    temperature: float = field(default_factory=lambda: get_env_float("RICE_LLM_TEMPERATURE", 0.2))
    max_tokens: int = field(default_factory=lambda: get_env_int("RICE_LLM_MAX_TOKENS", 2048))

    def __post_init__(self):
        """Validate configuration."""
        if self.provider is not None:
            self.provider = self.provider.strip().lower() or None
        if self.provider not in (None, "anthropic", "openai"):
            raise ValueError(f"RICE_LLM_PROVIDER must be 'anthropic' or 'openai', got: {self.provider}")
        if not 0 <= self.temperature <= 2:
            raise ValueError("RICE_LLM_TEMPERATURE must be between 0 and 2")
        if self.max_tokens <= 0:
            raise ValueError("RICE_LLM_MAX_TOKENS must be positive")

    @property
    def has_api_key(self) -> bool:
        return bool(
            os.getenv("ANTHROPIC_API_KEY")
            or os.getenv("OPENAI_API_KEY")
            or os.getenv("GPT_API_KEY")
        )


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


@dataclass
class ApiConfig:
    """HTTP API configuration."""

    cors_origins: List[str] = field(
        default_factory=lambda: DEFAULT_CORS_ORIGINS + get_env_list("CORS_ORIGINS")
    )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    app_name: str = "ricerank"
    app_version: str = "0.1.0"


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If a variable is present but invalid
    """
    return Settings()
