"""
RICE Scoring Module
===================

Deterministic prioritization of a backlog.

Components:
    - RiceScorer: score = reach × impact × confidence / effort
    - rank_items: stable descending sort, dense 1..N ranks
    - calculate_sensitivity: single-factor what-if scores
    - build_summary: top 3, quick wins, high-risk/high-reward
    - merge_notes: attach generated rationale by itemId

Generated text never changes a score or a rank.

Usage:
    from ricerank.scoring import rank_items, build_summary

    ranked = rank_items(items, "month")
    summary = build_summary(ranked)
"""

from .rice_models import (
    BacklogItem,
    ComputedScore,
    DuplicateItemError,
    ExportBundle,
    ItemNote,
    ModelNotes,
    NextStep,
    NotesMeta,
    RankedItem,
    Rationale,
    ReachInput,
    RiceInputs,
    RicePrioritizationError,
    SensitivityResult,
    Summary,
)
from .rice_scorer import (
    RiceScorer,
    calculate_rice,
    rank_items,
    round_half_away_from_zero,
)
from .sensitivity import calculate_sensitivity, sensitivity_by_item
from .summary import build_summary
from .rationale_merge import build_fallback_notes, merge_notes
from .scoring_config import RiceConfig, DEFAULT_CONFIG

__all__ = [
    # Models
    "BacklogItem",
    "ComputedScore",
    "ExportBundle",
    "ItemNote",
    "ModelNotes",
    "NextStep",
    "NotesMeta",
    "RankedItem",
    "Rationale",
    "ReachInput",
    "RiceInputs",
    "SensitivityResult",
    "Summary",
    # Errors
    "RicePrioritizationError",
    "DuplicateItemError",
    # Engine
    "RiceScorer",
    "calculate_rice",
    "rank_items",
    "round_half_away_from_zero",
    "calculate_sensitivity",
    "sensitivity_by_item",
    "build_summary",
    "build_fallback_notes",
    "merge_notes",
    "RiceConfig",
    "DEFAULT_CONFIG",
]
