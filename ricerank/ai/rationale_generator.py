"""
RICE Rationale Generator
========================

Asks the LLM to explain an already-computed ranking.

The LLM does NOT score and does NOT rank (both are deterministic).
It WRITES THE NOTES: why an item sits at its rank, which assumptions and
evidence gaps it carries, and what to do next.

Architecture:
    Items -> Deterministic ranking -> [LLM] Notes -> Merge by itemId

The provider is unreliable by assumption: any failure (no key, SDK missing,
transport error, invalid JSON, schema mismatch) yields the deterministic
fallback notes and the request still succeeds.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..api.models import ModelNotesSchema
from ..scoring.rationale_merge import build_fallback_notes
from ..scoring.rice_models import ModelNotes, RankedItem
from .llm_client import LLMClient, LLMResponse, get_llm_client

logger = logging.getLogger(__name__)


RATIONALE_SYSTEM_PROMPT = "You are a senior product manager using the RICE framework."

RATIONALE_RULES = [
    "- Do NOT change ranks or scores. They are already computed.",
    "- Do NOT invent evidence. If evidence is empty, explicitly call it out as an evidence gap.",
    "- If inputs look unrealistic or incomplete, ask up to 6 clarifying questions in meta.clarifyingQuestions.",
    "- Keep whyThisRank specific and short (2-3 sentences).",
    "- recommendedNextStep.suggestion must be actionable and concrete.",
]


def sanitize_for_model(items: Sequence[RankedItem]) -> List[Dict[str, Any]]:
    """The subset of each ranked item the LLM gets to see."""
    return [
        {
            "itemId": it.item_id,
            "title": it.title,
            "description": it.description,
            "evidence": it.evidence or "",
            "inputs": it.inputs.to_dict(),
            "computed": it.computed.to_dict(),
        }
        for it in items
    ]


def build_rationale_prompt(items: Sequence[RankedItem], timeframe: str, effort_unit: str) -> str:
    """User prompt for the notes request."""
    return "\n".join([
        "Rules:",
        *RATIONALE_RULES,
        "",
        f"Timeframe: {timeframe}",
        f"Effort unit: {effort_unit}",
        "",
        "Here are the backlog items (already ranked):",
        json.dumps(sanitize_for_model(items), indent=2),
    ])


class RationaleGenerator:
    """
    Generator of per-item rationale notes.

    Holds no request state; one instance can serve many requests.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ):
        """
        Args:
            llm_client: LLM client (auto-detected from env if not given)
            provider: Forced provider for auto-detection
            model: Model override for auto-detection
        """
        self._llm_client = llm_client
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def llm_client(self) -> LLMClient:
        """Lazy init of the LLM client."""
        if self._llm_client is None:
            self._llm_client = get_llm_client(provider=self.provider, model=self.model)
        return self._llm_client

    async def _request_notes(
        self, items: Sequence[RankedItem], timeframe: str, effort_unit: str
    ) -> Tuple[ModelNotes, LLMResponse]:
        client = self.llm_client
        response = await client.generate_json(
            prompt=build_rationale_prompt(items, timeframe, effort_unit),
            system=RATIONALE_SYSTEM_PROMPT,
            schema=ModelNotesSchema.model_json_schema(),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        validated = ModelNotesSchema.model_validate(response.data)
        notes = ModelNotes.from_dict(validated.model_dump(mode="json"))
        if not notes.meta.confidence_note:
            notes.meta.confidence_note = f"Rationale generated with AI ({client.model or 'LLM'})."
        return notes, response

    async def generate_notes(
        self,
        items: Sequence[RankedItem],
        timeframe: str,
        effort_unit: str,
        run_id: Optional[str] = None,
    ) -> Tuple[ModelNotes, bool]:
        """
        Notes for a ranked backlog.

        Returns:
            (notes, ai_used) - ai_used is False when fallback notes were used
        """
        if not items:
            return build_fallback_notes(items), False

        start = time.monotonic()
        try:
            notes, response = await self._request_notes(items, timeframe, effort_unit)
        except (ValueError, ValidationError, ImportError) as e:
            logger.warning(f"AI rationale unavailable, using fallback notes: {e}", extra={"run_id": run_id})
            return build_fallback_notes(items), False
        except Exception as e:
            # Provider SDK errors (auth, quota, network) have no common base class
            logger.warning(f"AI rationale request failed, using fallback notes: {e}", extra={"run_id": run_id})
            return build_fallback_notes(items), False

        duration = time.monotonic() - start
        logger.info(
            "AI rationale generated for %d items in %.2fs (%d tokens, $%.4f)",
            len(notes.items), duration, response.total_tokens, response.cost_usd,
            extra={"run_id": run_id, "item_count": len(items), "duration": round(duration, 3), **response.usage()},
        )
        return notes, True
