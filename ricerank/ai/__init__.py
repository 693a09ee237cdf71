"""
RICE Prioritizer AI Module
==========================

Generated text around a deterministic ranking:
- LLM clients (Anthropic, OpenAI)
- Rationale generator with deterministic fallback
"""

from .llm_client import (
    LLMClient,
    LLMProvider,
    LLMResponse,
    AnthropicClient,
    OpenAIClient,
    estimate_cost,
    get_llm_client,
)
from .rationale_generator import RationaleGenerator, build_rationale_prompt, sanitize_for_model

__all__ = [
    "LLMClient",
    "LLMProvider",
    "LLMResponse",
    "AnthropicClient",
    "OpenAIClient",
    "estimate_cost",
    "get_llm_client",
    "RationaleGenerator",
    "build_rationale_prompt",
    "sanitize_for_model",
]
