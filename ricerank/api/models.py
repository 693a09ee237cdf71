"""
RICE Prioritizer API Models
===========================

Pydantic models for the input, generated-notes and output boundaries.
Field names follow the JSON wire format (camelCase), aligned with the
frontend types.

- ScoreRequest: validated before anything reaches the scoring engine
- ModelNotesSchema: what the LLM is allowed to return
- ScoreResponse: final guardrail on the merged output
"""

import sys
from enum import Enum
from typing import Annotated, Dict, List, Union

from pydantic import AfterValidator, AllowInfNan, BaseModel, Field, FiniteFloat, Strict, field_validator

from ..scoring.scoring_config import MAX_ITEMS_PER_REQUEST


def _fits_float(value: int) -> int:
    if abs(value) > sys.float_info.max:
        raise ValueError("number is out of range")
    return value


# Finite JSON numbers; bools, numeric strings, NaN and Infinity are rejected
Number = Union[
    Annotated[int, Strict(), AfterValidator(_fits_float)],
    Annotated[float, Strict(), AllowInfNan(False)],
]


class Timeframe(str, Enum):
    """Reach timeframe."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


class EffortUnit(str, Enum):
    """Unit of the effort estimate."""
    DAYS = "days"
    POINTS = "points"


class ReachUnit(str, Enum):
    """What reach counts."""
    USERS = "users"
    ACCOUNTS = "accounts"
    EVENTS = "events"


class NextStepType(str, Enum):
    """Kind of recommended follow-up."""
    EXPERIMENT = "experiment"
    RESEARCH = "research"
    SHIP = "ship"
    DEFER = "defer"


# =============================================================================
# INPUT
# =============================================================================

class ReachModel(BaseModel):
    """Reach value with unit and timeframe."""
    value: Number
    unit: ReachUnit = ReachUnit.USERS
    timeframe: Timeframe


class InputsModel(BaseModel):
    """The four RICE inputs."""
    reach: ReachModel
    impact: Number
    confidence: Number
    effort: Number


class BacklogItemModel(BaseModel):
    """One backlog item as sent by the client."""
    itemId: str
    title: str
    description: str = ""
    evidence: str = ""
    inputs: InputsModel


class ScoreRequest(BaseModel):
    """
    Request to score a backlog.

    At most 10 items; item ids must be unique.
    """
    timeframe: Timeframe
    effortUnit: EffortUnit
    items: List[BacklogItemModel] = Field(..., max_length=MAX_ITEMS_PER_REQUEST)

    @field_validator("items")
    @classmethod
    def item_ids_unique(cls, items: List[BacklogItemModel]) -> List[BacklogItemModel]:
        seen = set()
        duplicates = []
        for it in items:
            if it.itemId in seen and it.itemId not in duplicates:
                duplicates.append(it.itemId)
            seen.add(it.itemId)
        if duplicates:
            raise ValueError(f"duplicate itemId values: {', '.join(duplicates)}")
        return items


# =============================================================================
# GENERATED NOTES
# =============================================================================

class RationaleModel(BaseModel):
    """Why an item sits where it does."""
    whyThisRank: str
    keyAssumptions: List[str] = Field(default_factory=list)
    evidenceGaps: List[str] = Field(default_factory=list)


class NextStepModel(BaseModel):
    """Recommended follow-up."""
    type: NextStepType
    suggestion: str
    successMetric: str


class NotesMetaModel(BaseModel):
    """Backlog-level notes from the LLM."""
    confidenceNote: str = ""
    assumptions: List[str] = Field(default_factory=list)
    clarifyingQuestions: List[str] = Field(default_factory=list)


class ItemNoteModel(BaseModel):
    """Per-item notes from the LLM."""
    itemId: str
    rationale: RationaleModel
    recommendedNextStep: NextStepModel


class ModelNotesSchema(BaseModel):
    """
    The only thing the LLM returns. Scores and ranks are computed in code.
    """
    meta: NotesMetaModel = Field(default_factory=NotesMetaModel)
    items: List[ItemNoteModel] = Field(default_factory=list)


# =============================================================================
# OUTPUT
# =============================================================================

class ComputedModel(BaseModel):
    """Deterministic score and rank."""
    riceScore: FiniteFloat
    rank: int = Field(..., ge=1)


class RankedItemModel(BaseModel):
    """Ranked, annotated backlog item."""
    itemId: str
    title: str
    description: str
    evidence: str = ""
    inputs: InputsModel
    computed: ComputedModel
    rationale: RationaleModel
    recommendedNextStep: NextStepModel


class SummaryModel(BaseModel):
    """Curated id lists."""
    top3: List[str] = Field(..., max_length=3)
    quickWins: List[str] = Field(..., max_length=3)
    highRiskHighReward: List[str] = Field(..., max_length=3)


class CsvRowModel(BaseModel):
    """Flat export row, all display strings."""
    itemId: str
    title: str
    reach: str
    impact: str
    confidence: str
    effort: str
    riceScore: str
    rank: str
    note: str


class ExportsModel(BaseModel):
    """Markdown document and tabular rows."""
    markdown: str
    csvRows: List[CsvRowModel]


class SensitivityModel(BaseModel):
    """What-if scores for one item."""
    baseScore: FiniteFloat
    confidenceMinus20: FiniteFloat
    confidencePlus20: FiniteFloat
    effortMinus20: FiniteFloat
    effortPlus20: FiniteFloat
    reachMinus20: FiniteFloat


class ResponseMetaModel(BaseModel):
    """Request echo plus generated backlog-level notes."""
    timeframe: Timeframe
    effortUnit: EffortUnit
    confidenceNote: str
    assumptions: List[str]
    clarifyingQuestions: List[str] = Field(..., max_length=6)


class ScoreResponse(BaseModel):
    """
    Complete scoring response.
    """
    meta: ResponseMetaModel
    items: List[RankedItemModel]
    summary: SummaryModel
    exports: ExportsModel
    sensitivity: Dict[str, SensitivityModel] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    llm: str
