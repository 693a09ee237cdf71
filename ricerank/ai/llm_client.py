"""
RICE Prioritizer LLM Client
===========================

Provider-neutral access to the model that writes rationale notes.
Claude (Anthropic) is preferred, OpenAI is the fallback provider.

The model only writes text around a ranking that is already computed.
Every call reports its token usage and an estimated cost so the caller
can log what a notes request spent.
"""

import os
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum

logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULT_MODELS = {
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-20241022",
    LLMProvider.OPENAI: "gpt-4o-mini",
}

# USD per 1M tokens (input, output)
MODEL_PRICING = {
    "claude-sonnet-4-20250514": (3.0, 15.0),
    "claude-3-5-haiku-20241022": (0.8, 4.0),
    "gpt-4o": (2.5, 10.0),
    "gpt-4o-mini": (0.15, 0.6),
}
UNKNOWN_MODEL_PRICING = (3.0, 15.0)


def estimate_cost(model: str, tokens_input: int, tokens_output: int) -> float:
    """Estimated USD cost of one call; unknown models use the upper tier."""
    price_in, price_out = MODEL_PRICING.get(model, UNKNOWN_MODEL_PRICING)
    return round((tokens_input * price_in + tokens_output * price_out) / 1_000_000, 6)


@dataclass
class LLMResponse:
    """
    One completed call.

    `data` holds the parsed object when the call asked for JSON.
    """
    content: str
    model: str
    provider: LLMProvider
    tokens_input: int
    tokens_output: int
    cost_usd: float
    data: Optional[Dict[str, Any]] = None

    @property
    def total_tokens(self) -> int:
        return self.tokens_input + self.tokens_output

    def usage(self) -> Dict[str, Any]:
        """Log-ready usage fields."""
        return {
            "provider": self.provider.value,
            "model": self.model,
            "tokens_input": self.tokens_input,
            "tokens_output": self.tokens_output,
            "cost_usd": self.cost_usd,
        }


def strip_code_fences(content: str) -> str:
    """Remove a ```json ... ``` wrapper around a JSON answer."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
    return content.strip()


JSON_ONLY_INSTRUCTIONS = """

IMPORTANT: Respond ONLY with valid JSON.
No text before or after the JSON.
No ```json or other markers."""


class LLMClient(ABC):
    """
    Abstract LLM client.

    Subclasses implement `generate` and build their result with
    `_response` so usage and cost are filled the same way everywhere.
    """

    provider: LLMProvider
    model: str = ""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text answer."""

    def _response(self, content: str, tokens_input: int, tokens_output: int) -> LLMResponse:
        return LLMResponse(
            content=content,
            model=self.model,
            provider=self.provider,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            cost_usd=estimate_cost(self.model, tokens_input, tokens_output),
        )

    async def generate_json(
        self,
        prompt: str,
        system: Optional[str] = None,
        schema: Optional[Dict[str, Any]] = None,
        max_tokens: int = 2048,
        temperature: float = 0.2,
    ) -> LLMResponse:
        """
        Generate an answer and parse it as JSON into `response.data`.

        Raises:
            ValueError: the answer is not a JSON object
        """
        json_system = (system or "") + JSON_ONLY_INSTRUCTIONS
        if schema:
            json_system += f"\n\nExpected schema:\n{json.dumps(schema, indent=2)}"

        response = await self.generate(
            prompt=prompt,
            system=json_system,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        try:
            data = json.loads(strip_code_fences(response.content or ""))
        except json.JSONDecodeError as e:
            logger.error(f"JSON parse error: {e}\nContent: {(response.content or '')[:500]}")
            raise ValueError(f"LLM did not return valid JSON: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"LLM returned JSON {type(data).__name__}, expected an object")

        response.data = data
        return response


class AnthropicClient(LLMClient):
    """Client for Claude (Anthropic)."""

    provider = LLMProvider.ANTHROPIC

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.model = model or DEFAULT_MODELS[self.provider]
        self._client = None

        if not self.api_key:
            logger.warning("ANTHROPIC_API_KEY not set - AI rationale disabled")

    def _get_client(self):
        """Lazy init of the Anthropic SDK client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY required")

        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        message = self._get_client().messages.create(**kwargs)
        return self._response(
            message.content[0].text,
            message.usage.input_tokens,
            message.usage.output_tokens,
        )


class OpenAIClient(LLMClient):
    """Client for OpenAI chat completions, used when no Anthropic key is set."""

    provider = LLMProvider.OPENAI

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        # Support both OPENAI_API_KEY and GPT_API_KEY
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or os.getenv("GPT_API_KEY")
        self.model = model or DEFAULT_MODELS[self.provider]
        self._client = None

    def _get_client(self):
        if self._client is None:
            import openai
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY required")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        completion = self._get_client().chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return self._response(
            completion.choices[0].message.content or "",
            completion.usage.prompt_tokens,
            completion.usage.completion_tokens,
        )


def get_llm_client(
    provider: Optional[str] = None,
    model: Optional[str] = None,
) -> LLMClient:
    """
    Factory for an LLM client.

    Priority:
    1. Explicit provider
    2. ANTHROPIC_API_KEY present -> Claude
    3. OPENAI_API_KEY or GPT_API_KEY present -> GPT
    4. Error
    """
    openai_key = os.getenv("OPENAI_API_KEY") or os.getenv("GPT_API_KEY")
    anthropic_key = os.getenv("ANTHROPIC_API_KEY")

    if provider == "openai" or (not provider and openai_key and not anthropic_key):
        return OpenAIClient(model=model)

    if provider == "anthropic" or anthropic_key:
        return AnthropicClient(model=model)

    raise ValueError(
        "No LLM API key found. Set ANTHROPIC_API_KEY, OPENAI_API_KEY, or GPT_API_KEY"
    )
