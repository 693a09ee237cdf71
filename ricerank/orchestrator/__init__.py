"""
RICE Prioritizer Orchestrator Module
====================================

Composition layer around the scoring engine.

Components:
    - PrioritizationPipeline: rank -> notes -> merge -> summary/exports
    - setup_logging: human or JSON log output
    - CLI: Command-line interface

Usage:
    from ricerank.orchestrator import PrioritizationPipeline

    response = asyncio.run(PrioritizationPipeline(use_ai=False).run(request))
"""

from .pipeline import (
    PrioritizationPipeline,
    OutputValidationError,
    rank_request,
    request_items,
)
from .logging_config import setup_logging, ConsoleFormatter, JSONFormatter

__all__ = [
    "PrioritizationPipeline",
    "OutputValidationError",
    "rank_request",
    "request_items",
    "setup_logging",
    "ConsoleFormatter",
    "JSONFormatter",
]
