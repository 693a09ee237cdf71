"""
RICE Prioritization Pipeline
============================

Composes the deterministic engine with the best-effort rationale layer:

1. Ranking (score, stable sort, dense rank)
2. Rationale notes (LLM, or deterministic fallback)
3. Merge notes by itemId
4. Summary, exports, sensitivity
5. Output validation (final guardrail)

Features:
    - Deterministic: scores and ranks never depend on step 2
    - Resilient: an LLM failure degrades to fallback notes, never to an error
    - Isolated: no state survives a run

Usage:
    from ricerank.orchestrator.pipeline import PrioritizationPipeline

    pipeline = PrioritizationPipeline(use_ai=False)
    response = asyncio.run(pipeline.run(request))
"""

import logging
import uuid
from typing import List, Optional

from pydantic import ValidationError

from ..ai.rationale_generator import RationaleGenerator
from ..api.models import ScoreRequest, ScoreResponse
from ..export.exporter import build_exports
from ..scoring.rationale_merge import build_fallback_notes, merge_notes
from ..scoring.rice_models import BacklogItem, RankedItem, RicePrioritizationError
from ..scoring.rice_scorer import rank_items
from ..scoring.scoring_config import MAX_CLARIFYING_QUESTIONS
from ..scoring.sensitivity import sensitivity_by_item
from ..scoring.summary import build_summary

logger = logging.getLogger(__name__)


class OutputValidationError(RicePrioritizationError):
    """The merged response does not match the output schema."""


def request_items(request: ScoreRequest) -> List[BacklogItem]:
    """Domain items from a validated request."""
    payload = request.model_dump(mode="json")
    return [BacklogItem.from_dict(it) for it in payload["items"]]


def rank_request(request: ScoreRequest) -> List[RankedItem]:
    """Deterministic ranking of a validated request, no notes attached."""
    return rank_items(request_items(request), request.timeframe.value)


class PrioritizationPipeline:
    """
    Caller that composes rank -> notes -> merge -> derivations.

    Stateless between runs: the generator holds only a lazily built LLM
    client.
    """

    def __init__(
        self,
        generator: Optional[RationaleGenerator] = None,
        use_ai: bool = True,
    ):
        self.generator = generator or RationaleGenerator()
        self.use_ai = use_ai

    async def run(self, request: ScoreRequest, use_ai: Optional[bool] = None) -> ScoreResponse:
        """
        Score, rank, annotate and export a backlog.

        Args:
            request: Validated request
            use_ai: Per-call override of the instance setting

        Returns:
            Validated ScoreResponse

        Raises:
            OutputValidationError: the merged output failed its schema
        """
        run_id = str(uuid.uuid4())[:8]
        use_ai = self.use_ai if use_ai is None else use_ai
        timeframe = request.timeframe.value
        effort_unit = request.effortUnit.value

        ranked = rank_request(request)
        logger.info(
            f"Ranked {len(ranked)} items ({timeframe}, {effort_unit})",
            extra={"run_id": run_id, "item_count": len(ranked)},
        )

        if use_ai:
            notes, ai_used = await self.generator.generate_notes(ranked, timeframe, effort_unit, run_id=run_id)
        else:
            notes, ai_used = build_fallback_notes(ranked), False

        merged = merge_notes(ranked, notes)

        output = {
            "meta": {
                "timeframe": timeframe,
                "effortUnit": effort_unit,
                "confidenceNote": notes.meta.confidence_note,
                "assumptions": list(notes.meta.assumptions),
                "clarifyingQuestions": list(notes.meta.clarifying_questions)[:MAX_CLARIFYING_QUESTIONS],
            },
            "items": [it.to_dict() for it in merged],
            "summary": build_summary(merged).to_dict(),
            "exports": build_exports(merged, timeframe, effort_unit).to_dict(),
            "sensitivity": {
                item_id: result.to_dict()
                for item_id, result in sensitivity_by_item(merged).items()
            },
        }

        try:
            response = ScoreResponse.model_validate(output)
        except ValidationError as e:
            logger.exception("Output validation failed", extra={"run_id": run_id})
            raise OutputValidationError(str(e)) from e

        logger.info(
            f"Scoring complete (ai_used={ai_used})",
            extra={"run_id": run_id, "item_count": len(merged), "ai_used": ai_used},
        )
        return response
