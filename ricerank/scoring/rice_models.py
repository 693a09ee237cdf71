"""
RICE Domain Models
==================

Dataclasses shared by the scorer, ranker, summary and export layers.

Wire format is camelCase (itemId, riceScore, ...); attributes are snake_case.
`from_dict` reads the wire format, `to_dict` writes it back.

Nothing here is mutated after ranking: derivations build new objects
with `dataclasses.replace`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .scoring_config import DEFAULT_NEXT_STEP_TYPE, DEFAULT_REACH_UNIT


class RicePrioritizationError(Exception):
    """Base error of the prioritization engine."""


class DuplicateItemError(RicePrioritizationError, ValueError):
    """Two items of one ranking call share the same itemId."""

    def __init__(self, item_ids: List[str]):
        self.item_ids = item_ids
        super().__init__(f"Duplicate itemId values: {', '.join(item_ids)}")


@dataclass
class ReachInput:
    """Reach count with its unit and timeframe."""
    value: float
    timeframe: str
    unit: str = DEFAULT_REACH_UNIT

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit, "timeframe": self.timeframe}


@dataclass
class RiceInputs:
    """The four numeric RICE inputs of one item."""
    reach: ReachInput
    impact: float
    confidence: float   # percentage, intended 0-100
    effort: float       # caller-chosen unit (days|points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reach": self.reach.to_dict(),
            "impact": self.impact,
            "confidence": self.confidence,
            "effort": self.effort,
        }


@dataclass
class BacklogItem:
    """
    User-supplied work item, before scoring.
    """
    item_id: str
    title: str
    inputs: RiceInputs
    description: str = ""
    evidence: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BacklogItem":
        """Build an item from its camelCase wire form."""
        raw_inputs = data["inputs"]
        raw_reach = raw_inputs["reach"]
        reach = ReachInput(
            value=raw_reach["value"],
            timeframe=raw_reach["timeframe"],
            unit=raw_reach.get("unit") or DEFAULT_REACH_UNIT,
        )
        return cls(
            item_id=data["itemId"],
            title=data["title"],
            description=data.get("description") or "",
            evidence=data.get("evidence") or "",
            inputs=RiceInputs(
                reach=reach,
                impact=raw_inputs["impact"],
                confidence=raw_inputs["confidence"],
                effort=raw_inputs["effort"],
            ),
        )


@dataclass
class Rationale:
    """Free-text explanation attached to a ranked item."""
    why_this_rank: str = ""
    key_assumptions: List[str] = field(default_factory=list)
    evidence_gaps: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rationale":
        return cls(
            why_this_rank=data.get("whyThisRank", ""),
            key_assumptions=list(data.get("keyAssumptions") or []),
            evidence_gaps=list(data.get("evidenceGaps") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "whyThisRank": self.why_this_rank,
            "keyAssumptions": list(self.key_assumptions),
            "evidenceGaps": list(self.evidence_gaps),
        }


@dataclass
class NextStep:
    """Recommended follow-up for a ranked item."""
    type: str = DEFAULT_NEXT_STEP_TYPE
    suggestion: str = ""
    success_metric: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NextStep":
        return cls(
            type=data.get("type", DEFAULT_NEXT_STEP_TYPE),
            suggestion=data.get("suggestion", ""),
            success_metric=data.get("successMetric", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "suggestion": self.suggestion,
            "successMetric": self.success_metric,
        }


@dataclass
class ComputedScore:
    """Deterministic outputs of the ranker."""
    rice_score: float
    rank: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"riceScore": self.rice_score, "rank": self.rank}


@dataclass
class RankedItem:
    """
    A backlog item after scoring and ranking.

    `rationale` and `recommended_next_step` start as empty placeholders and
    are filled later by the rationale merge. They never influence
    `computed`.
    """
    item_id: str
    title: str
    description: str
    evidence: str
    inputs: RiceInputs
    computed: ComputedScore
    rationale: Rationale = field(default_factory=Rationale)
    recommended_next_step: NextStep = field(default_factory=NextStep)

    @property
    def rice_score(self) -> float:
        return self.computed.rice_score

    @property
    def rank(self) -> int:
        return self.computed.rank

    def to_dict(self) -> Dict[str, Any]:
        """Wire format used by the API response."""
        return {
            "itemId": self.item_id,
            "title": self.title,
            "description": self.description,
            "evidence": self.evidence,
            "inputs": self.inputs.to_dict(),
            "computed": self.computed.to_dict(),
            "rationale": self.rationale.to_dict(),
            "recommendedNextStep": self.recommended_next_step.to_dict(),
        }


@dataclass
class SensitivityResult:
    """Scores of one item under single-factor perturbations."""
    base_score: float
    confidence_minus_20: float
    confidence_plus_20: float
    effort_minus_20: float
    effort_plus_20: float
    reach_minus_20: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "baseScore": self.base_score,
            "confidenceMinus20": self.confidence_minus_20,
            "confidencePlus20": self.confidence_plus_20,
            "effortMinus20": self.effort_minus_20,
            "effortPlus20": self.effort_plus_20,
            "reachMinus20": self.reach_minus_20,
        }


@dataclass
class Summary:
    """Curated id lists derived from a ranked backlog."""
    top3: List[str] = field(default_factory=list)
    quick_wins: List[str] = field(default_factory=list)
    high_risk_high_reward: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "top3": list(self.top3),
            "quickWins": list(self.quick_wins),
            "highRiskHighReward": list(self.high_risk_high_reward),
        }


@dataclass
class ExportBundle:
    """Markdown document plus flat string rows."""
    markdown: str
    csv_rows: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"markdown": self.markdown, "csvRows": [dict(r) for r in self.csv_rows]}


@dataclass
class ItemNote:
    """Generated rationale and next step for one item id."""
    item_id: str
    rationale: Rationale
    recommended_next_step: NextStep

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemNote":
        return cls(
            item_id=data["itemId"],
            rationale=Rationale.from_dict(data.get("rationale") or {}),
            recommended_next_step=NextStep.from_dict(data.get("recommendedNextStep") or {}),
        )


@dataclass
class NotesMeta:
    """Backlog-level notes returned with the generated rationale."""
    confidence_note: str = ""
    assumptions: List[str] = field(default_factory=list)
    clarifying_questions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotesMeta":
        return cls(
            confidence_note=data.get("confidenceNote") or "",
            assumptions=list(data.get("assumptions") or []),
            clarifying_questions=list(data.get("clarifyingQuestions") or []),
        )


@dataclass
class ModelNotes:
    """
    Everything the generated-text provider contributes to one response.
    """
    meta: NotesMeta
    items: List[ItemNote] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelNotes":
        return cls(
            meta=NotesMeta.from_dict(data.get("meta") or {}),
            items=[ItemNote.from_dict(n) for n in data.get("items") or []],
        )
