"""
RICE Scorer and Ranker
======================

Deterministic scoring and ranking of a backlog.

FORMULA:
    score = reach × impact × (clamp(confidence, 0, 100) / 100) / max(effort, 1e-4)

Rounded to 2 decimals, half away from zero, after scaling by 100.
The float product is rounded as-is: a value whose binary form sits just
below a .xx5 boundary rounds down.

RANKING:
    - stable sort on score, descending
    - equal scores keep their input order (no secondary key)
    - rank = 1-based position after the sort, never collapsed

The scorer accepts any number (negative reach or impact included) and never
raises. Validating business semantics is the caller's job.

Usage:
    from ricerank.scoring import calculate_rice, rank_items

    calculate_rice(100, 1, 50, 5)       # 10.0
    ranked = rank_items(items, "month")
"""

import math
from collections import Counter
from dataclasses import replace
from typing import List, Optional, Sequence

from .rice_models import (
    BacklogItem,
    ComputedScore,
    DuplicateItemError,
    NextStep,
    RankedItem,
    Rationale,
)
from .scoring_config import DEFAULT_CONFIG, RiceConfig


def round_half_away_from_zero(value: float, decimals: int = 2) -> float:
    """Round `value` to `decimals` places, halves going away from zero."""
    if not math.isfinite(value):
        return value
    factor = 10 ** decimals
    scaled = math.floor(abs(value) * factor + 0.5)
    if scaled == 0:
        return 0.0
    rounded = scaled / factor
    return -rounded if value < 0 else rounded


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class RiceScorer:
    """
    Stateless RICE scoring engine.

    Holds only a frozen configuration, so one instance can be shared across
    requests or created per call.
    """

    def __init__(self, config: Optional[RiceConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def score(
        self,
        reach: float,
        impact: float,
        confidence: float,
        effort: float,
    ) -> float:
        """
        Compute one RICE score.

        Args:
            reach: Units affected per timeframe
            impact: Multiplier per affected unit
            confidence: Percentage, clamped to [0, 100]
            effort: Cost, floored at 1e-4

        Returns:
            Score rounded to 2 decimals
        """
        cfg = self.config.scorer
        confidence_fraction = clamp(confidence, cfg.confidence_min, cfg.confidence_max) / 100
        safe_effort = max(cfg.min_effort, effort)

        raw = (reach * impact * confidence_fraction) / safe_effort
        return round_half_away_from_zero(raw, cfg.decimals)

    def rank(self, items: Sequence[BacklogItem], timeframe: str) -> List[RankedItem]:
        """
        Score, sort and rank a backlog.

        Every item's reach timeframe is replaced by `timeframe` on the
        returned copy so the whole list displays one horizon.

        Raises:
            DuplicateItemError: two items share an itemId
        """
        duplicates = [item_id for item_id, n in Counter(i.item_id for i in items).items() if n > 1]
        if duplicates:
            raise DuplicateItemError(duplicates)

        scored = []
        for item in items:
            rice_score = self.score(
                item.inputs.reach.value,
                item.inputs.impact,
                item.inputs.confidence,
                item.inputs.effort,
            )
            inputs = replace(item.inputs, reach=replace(item.inputs.reach, timeframe=timeframe))
            scored.append(RankedItem(
                item_id=item.item_id,
                title=item.title,
                description=item.description,
                evidence=item.evidence,
                inputs=inputs,
                computed=ComputedScore(rice_score=rice_score),
                rationale=Rationale(),
                recommended_next_step=NextStep(),
            ))

        # sorted() is stable with reverse=True: ties keep input order
        ranked = sorted(scored, key=lambda it: it.computed.rice_score, reverse=True)
        for position, item in enumerate(ranked, 1):
            item.computed.rank = position

        return ranked


def calculate_rice(reach: float, impact: float, confidence: float, effort: float) -> float:
    """Score with the default configuration."""
    return RiceScorer().score(reach, impact, confidence, effort)


def rank_items(items: Sequence[BacklogItem], timeframe: str) -> List[RankedItem]:
    """Rank with the default configuration."""
    return RiceScorer().rank(items, timeframe)
