"""
RICE Prioritizer Data Module
============================

Configuration loading and sample backlogs.

Quick Start:
    from ricerank.data import load_settings, build_sample_request

    settings = load_settings()
    request = build_sample_request("saas", timeframe="quarter")

Configuration:
    Set environment variables or create a .env file at the project root.
"""

from .config import (
    Settings,
    LLMConfig,
    ApiConfig,
    LoggingConfig,
    load_settings,
)
from .samples import (
    SAMPLE_SAAS,
    SAMPLE_CONSUMER,
    SAMPLES,
    build_sample_request,
)

__all__ = [
    # Configuration
    "Settings",
    "LLMConfig",
    "ApiConfig",
    "LoggingConfig",
    "load_settings",
    # Samples
    "SAMPLE_SAAS",
    "SAMPLE_CONSUMER",
    "SAMPLES",
    "build_sample_request",
]
