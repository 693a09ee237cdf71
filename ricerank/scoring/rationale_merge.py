"""
Rationale merge
===============

Attaches generated notes to ranked items by itemId.

The merge is a pure function: it never touches scores, ranks or order, and
it fills every item that has no matching note with deterministic fallback
text. Two fallback sets exist:

- provider unavailable: the whole notes payload is replaced by
  `build_fallback_notes`
- provider answered but skipped an item: `missing_note_rationale` /
  `missing_note_next_step`
"""

from dataclasses import replace
from typing import Dict, List, Sequence

from .rice_models import (
    ItemNote,
    ModelNotes,
    NextStep,
    NotesMeta,
    RankedItem,
    Rationale,
)
from .scoring_config import DEFAULT_NEXT_STEP_TYPE

NO_EVIDENCE_GAP = "No evidence provided."

AI_UNAVAILABLE_NOTE = "AI rationale unavailable. Using deterministic scoring only."

FALLBACK_WHY = "Ranked by deterministic RICE score from the provided inputs."
FALLBACK_SUGGESTION = "Add evidence and validate reach/impact assumptions."
FALLBACK_METRIC = "Validated improvement in a primary KPI."

MISSING_NOTE_WHY = "Ranked by RICE score using provided inputs."
MISSING_NOTE_SUGGESTION = "Gather missing evidence and validate reach/impact assumptions."
MISSING_NOTE_METRIC = "Validated impact on a primary KPI."


def evidence_gaps_for(item: RankedItem) -> List[str]:
    """A blank evidence field is itself an evidence gap."""
    return [] if (item.evidence or "").strip() else [NO_EVIDENCE_GAP]


def build_fallback_notes(items: Sequence[RankedItem]) -> ModelNotes:
    """Notes used when the generated-text provider is unavailable."""
    return ModelNotes(
        meta=NotesMeta(confidence_note=AI_UNAVAILABLE_NOTE),
        items=[
            ItemNote(
                item_id=it.item_id,
                rationale=Rationale(
                    why_this_rank=FALLBACK_WHY,
                    evidence_gaps=evidence_gaps_for(it),
                ),
                recommended_next_step=NextStep(
                    type=DEFAULT_NEXT_STEP_TYPE,
                    suggestion=FALLBACK_SUGGESTION,
                    success_metric=FALLBACK_METRIC,
                ),
            )
            for it in items
        ],
    )


def missing_note_rationale(item: RankedItem) -> Rationale:
    return Rationale(why_this_rank=MISSING_NOTE_WHY, evidence_gaps=evidence_gaps_for(item))


def missing_note_next_step() -> NextStep:
    return NextStep(
        type=DEFAULT_NEXT_STEP_TYPE,
        suggestion=MISSING_NOTE_SUGGESTION,
        success_metric=MISSING_NOTE_METRIC,
    )


def merge_notes(items: Sequence[RankedItem], notes: ModelNotes) -> List[RankedItem]:
    """
    Return copies of `items` with rationale and next step filled in.

    When several notes share an itemId the first one wins. Notes for ids
    that are not in `items` are ignored.
    """
    by_id: Dict[str, ItemNote] = {}
    for note in notes.items:
        by_id.setdefault(note.item_id, note)

    merged = []
    for item in items:
        note = by_id.get(item.item_id)
        if note is None:
            rationale = missing_note_rationale(item)
            next_step = missing_note_next_step()
        else:
            rationale = note.rationale
            next_step = note.recommended_next_step
        merged.append(replace(
            item,
            inputs=replace(item.inputs, reach=replace(item.inputs.reach)),
            computed=replace(item.computed),
            rationale=replace(rationale, key_assumptions=list(rationale.key_assumptions),
                              evidence_gaps=list(rationale.evidence_gaps)),
            recommended_next_step=replace(next_step),
        ))
    return merged
