"""
Summary builder: curated id lists over a ranked backlog.

The input is assumed to be in ranked order already. Filters are
independent, so one item can show up in several lists.
"""

from typing import Callable, List, Optional, Sequence

from .rice_models import RankedItem, Summary
from .scoring_config import DEFAULT_CONFIG, RiceConfig


def _pick(items: Sequence[RankedItem], keep: Callable[[RankedItem], bool], limit: int) -> List[str]:
    return [it.item_id for it in items if keep(it)][:limit]


def build_summary(items: Sequence[RankedItem], config: Optional[RiceConfig] = None) -> Summary:
    """
    Derive top picks, quick wins and risky bets.

    Args:
        items: Ranked items, best score first
        config: Threshold overrides (tests only, defaults are the model)

    Returns:
        Summary with each list capped at 3 ids
    """
    cfg = (config or DEFAULT_CONFIG).summary

    def is_quick_win(it: RankedItem) -> bool:
        return (
            it.computed.rice_score >= cfg.quick_win_min_score
            and it.inputs.effort <= cfg.quick_win_max_effort
        )

    def is_risky_bet(it: RankedItem) -> bool:
        return (
            it.inputs.confidence <= cfg.risky_max_confidence
            and it.inputs.impact >= cfg.risky_min_impact
        )

    return Summary(
        top3=[it.item_id for it in items[:cfg.max_per_list]],
        quick_wins=_pick(items, is_quick_win, cfg.max_per_list),
        high_risk_high_reward=_pick(items, is_risky_bet, cfg.max_per_list),
    )
