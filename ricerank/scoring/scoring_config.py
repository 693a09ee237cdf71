"""
Configuration of the fixed thresholds used by the RICE engine.

Every constant of the prioritization model lives here so that the scoring
code itself carries no magic numbers.

PHILOSOPHY:
- Thresholds are part of the model, not per-call options
- Values are frozen: a ranking must be reproducible from its inputs alone
- Changing a value here changes every ranking, on purpose

RICE:
    score = reach × impact × (confidence / 100) / effort
"""

from dataclasses import dataclass, field
from typing import Tuple


TIMEFRAMES: Tuple[str, ...] = ("week", "month", "quarter")
EFFORT_UNITS: Tuple[str, ...] = ("days", "points")
REACH_UNITS: Tuple[str, ...] = ("users", "accounts", "events")
NEXT_STEP_TYPES: Tuple[str, ...] = ("experiment", "research", "ship", "defer")

DEFAULT_REACH_UNIT = "users"
DEFAULT_NEXT_STEP_TYPE = "research"

# Hard cap on items per ranking call, enforced at the input boundary
MAX_ITEMS_PER_REQUEST = 10

# Generated clarifying questions kept in the response meta
MAX_CLARIFYING_QUESTIONS = 6


@dataclass(frozen=True)
class ScorerConfig:
    """
    Bounds applied by the scorer before computing a score.

    - confidence is a percentage, clamped to [0, 100]
    - effort is floored at min_effort so division never fails
    - no upper clamp on effort, reach or impact
    """
    confidence_min: float = 0.0
    confidence_max: float = 100.0
    min_effort: float = 1e-4
    decimals: int = 2


@dataclass(frozen=True)
class SensitivityConfig:
    """
    Single-factor perturbations computed per ranked item.

    Only reach is lowered: there is no reach +20% scenario.
    """
    confidence_delta: float = 20.0
    effort_down_factor: float = 0.8
    effort_up_factor: float = 1.2
    reach_down_factor: float = 0.8


@dataclass(frozen=True)
class SummaryConfig:
    """
    Filters of the curated id lists.

    QUICK WINS:        score >= 20 and effort <= 8
    HIGH RISK / REWARD: confidence <= 60 and impact >= 2
    """
    max_per_list: int = 3
    quick_win_min_score: float = 20.0
    quick_win_max_effort: float = 8.0
    risky_max_confidence: float = 60.0
    risky_min_impact: float = 2.0


@dataclass
class RiceConfig:
    """Aggregate of all engine thresholds."""
    scorer: ScorerConfig = field(default_factory=ScorerConfig)
    sensitivity: SensitivityConfig = field(default_factory=SensitivityConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)


DEFAULT_CONFIG = RiceConfig()
