"""
Sensitivity analysis of ranked items.

Each scenario changes exactly one input and rescores with the same scorer:

    confidence ± 20 points (clamped to [0, 100] first)
    effort × 0.8 / × 1.2
    reach × 0.8

The base score is the item's existing riceScore, never recomputed.
"""

from typing import Dict, Optional, Sequence

from .rice_models import RankedItem, SensitivityResult
from .rice_scorer import RiceScorer, clamp
from .scoring_config import DEFAULT_CONFIG, RiceConfig


def calculate_sensitivity(item: RankedItem, config: Optional[RiceConfig] = None) -> SensitivityResult:
    """Single-factor sensitivity of one ranked item."""
    config = config or DEFAULT_CONFIG
    scorer = RiceScorer(config)
    sens = config.sensitivity
    bounds = config.scorer

    r = item.inputs.reach.value
    i = item.inputs.impact
    c = item.inputs.confidence
    e = item.inputs.effort

    c_low = clamp(c - sens.confidence_delta, bounds.confidence_min, bounds.confidence_max)
    c_high = clamp(c + sens.confidence_delta, bounds.confidence_min, bounds.confidence_max)

    return SensitivityResult(
        base_score=item.computed.rice_score,
        confidence_minus_20=scorer.score(r, i, c_low, e),
        confidence_plus_20=scorer.score(r, i, c_high, e),
        effort_minus_20=scorer.score(r, i, c, e * sens.effort_down_factor),
        effort_plus_20=scorer.score(r, i, c, e * sens.effort_up_factor),
        reach_minus_20=scorer.score(r * sens.reach_down_factor, i, c, e),
    )


def sensitivity_by_item(items: Sequence[RankedItem], config: Optional[RiceConfig] = None) -> Dict[str, SensitivityResult]:
    """Sensitivity of every item, keyed by itemId in ranked order."""
    return {it.item_id: calculate_sensitivity(it, config) for it in items}
