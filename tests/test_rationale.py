"""
Tests for rationale generation and the merge by itemId.

The LLM is replaced by in-process fake clients: no network, no SDK.

Scenarios tested:
- Fallback notes (evidence gap rule)
- Merge keeps scores, ranks and order
- Missing-match fallback text
- Valid, fenced, invalid and off-schema LLM answers
- Provider errors degrade to fallback notes

Usage:
    pytest tests/test_rationale.py -v
"""

import asyncio
import json
import logging

import pytest

from ricerank.ai.llm_client import (
    LLMClient,
    LLMProvider,
    estimate_cost,
    get_llm_client,
    strip_code_fences,
)
from ricerank.ai.rationale_generator import (
    RationaleGenerator,
    build_rationale_prompt,
    sanitize_for_model,
)
from ricerank.scoring.rationale_merge import (
    AI_UNAVAILABLE_NOTE,
    FALLBACK_WHY,
    MISSING_NOTE_SUGGESTION,
    MISSING_NOTE_WHY,
    NO_EVIDENCE_GAP,
    build_fallback_notes,
    merge_notes,
)
from ricerank.scoring.rice_models import (
    BacklogItem,
    ItemNote,
    ModelNotes,
    NextStep,
    NotesMeta,
    Rationale,
    ReachInput,
    RiceInputs,
)
from ricerank.scoring.rice_scorer import rank_items


def make_item(item_id, reach=100, evidence=""):
    return BacklogItem(
        item_id=item_id,
        title=f"Item {item_id}",
        evidence=evidence,
        inputs=RiceInputs(
            reach=ReachInput(value=reach, timeframe="month"),
            impact=1,
            confidence=50,
            effort=5,
        ),
    )


def note_for(item_id, why="Because.", step_type="experiment"):
    return {
        "itemId": item_id,
        "rationale": {"whyThisRank": why, "keyAssumptions": ["A1"], "evidenceGaps": []},
        "recommendedNextStep": {
            "type": step_type,
            "suggestion": f"Test {item_id}",
            "successMetric": "Conversion +5%",
        },
    }


class FakeLLMClient(LLMClient):
    """Returns a canned answer and records the prompts it received."""

    provider = LLMProvider.ANTHROPIC

    def __init__(self, content="", error=None):
        self.model = "fake-model"
        self.content = content
        self.error = error
        self.prompts = []

    async def generate(self, prompt, system=None, max_tokens=1024, temperature=0.7):
        self.prompts.append((system, prompt))
        if self.error is not None:
            raise self.error
        return self._response(self.content, 1000, 500)


class TestFallbackNotes:

    def setup_method(self):
        self.ranked = rank_items([
            make_item("WITH", evidence="Survey: 23 votes"),
            make_item("BLANK", evidence="   "),
            make_item("EMPTY"),
        ], "month")

    def test_meta_note(self):
        notes = build_fallback_notes(self.ranked)
        assert notes.meta.confidence_note == AI_UNAVAILABLE_NOTE
        assert notes.meta.clarifying_questions == []

    def test_evidence_gap_only_for_blank_evidence(self):
        gaps = {n.item_id: n.rationale.evidence_gaps for n in build_fallback_notes(self.ranked).items}
        assert gaps == {"WITH": [], "BLANK": [NO_EVIDENCE_GAP], "EMPTY": [NO_EVIDENCE_GAP]}

    def test_generic_texts(self):
        note = build_fallback_notes(self.ranked).items[0]
        assert note.rationale.why_this_rank == FALLBACK_WHY
        assert note.recommended_next_step.type == "research"
        assert note.recommended_next_step.suggestion == "Add evidence and validate reach/impact assumptions."
        assert note.recommended_next_step.success_metric == "Validated improvement in a primary KPI."


class TestMergeNotes:

    def setup_method(self):
        self.ranked = rank_items([make_item("A", reach=100), make_item("B", reach=900)], "month")

    def test_matching_note_attached(self):
        notes = ModelNotes.from_dict({"meta": {}, "items": [note_for("A"), note_for("B")]})
        merged = merge_notes(self.ranked, notes)

        assert merged[0].rationale.why_this_rank == "Because."
        assert merged[0].rationale.key_assumptions == ["A1"]
        assert merged[0].recommended_next_step.suggestion == "Test B"

    def test_scores_ranks_and_order_untouched(self):
        notes = ModelNotes.from_dict({"meta": {}, "items": [note_for("A"), note_for("B")]})
        merged = merge_notes(self.ranked, notes)

        assert [(it.item_id, it.rice_score, it.rank) for it in merged] == \
               [(it.item_id, it.rice_score, it.rank) for it in self.ranked]

    def test_missing_note_gets_fallback(self):
        notes = ModelNotes.from_dict({"meta": {}, "items": [note_for("B")]})
        merged = {it.item_id: it for it in merge_notes(self.ranked, notes)}

        assert merged["A"].rationale.why_this_rank == MISSING_NOTE_WHY
        assert merged["A"].rationale.evidence_gaps == [NO_EVIDENCE_GAP]
        assert merged["A"].recommended_next_step.suggestion == MISSING_NOTE_SUGGESTION
        assert merged["A"].recommended_next_step.success_metric == "Validated impact on a primary KPI."

    def test_unknown_ids_ignored(self):
        notes = ModelNotes.from_dict({"meta": {}, "items": [note_for("ZZZ")]})
        merged = merge_notes(self.ranked, notes)

        assert [it.item_id for it in merged] == ["B", "A"]
        assert all(it.rationale.why_this_rank == MISSING_NOTE_WHY for it in merged)

    def test_first_duplicate_note_wins(self):
        notes = ModelNotes.from_dict({"meta": {}, "items": [note_for("A", why="first"), note_for("A", why="second")]})
        merged = {it.item_id: it for it in merge_notes(self.ranked, notes)}
        assert merged["A"].rationale.why_this_rank == "first"

    def test_source_items_not_mutated(self):
        notes = ModelNotes(
            meta=NotesMeta(),
            items=[ItemNote("A", Rationale(why_this_rank="x"), NextStep(type="ship"))],
        )
        merge_notes(self.ranked, notes)

        assert all(it.rationale.why_this_rank == "" for it in self.ranked)
        assert all(it.recommended_next_step.type == "research" for it in self.ranked)

    def test_inputs_copied(self):
        merged = merge_notes(self.ranked, ModelNotes.from_dict({"items": [note_for("A")]}))

        assert merged[0].inputs == self.ranked[0].inputs
        assert merged[0].inputs is not self.ranked[0].inputs
        assert merged[0].inputs.reach is not self.ranked[0].inputs.reach



class TestLLMClientHelpers:

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'

    def test_generate_json_rejects_non_json(self):
        client = FakeLLMClient(content="Sure! Here are your notes.")
        with pytest.raises(ValueError):
            asyncio.run(client.generate_json("prompt"))

    def test_generate_json_rejects_non_object(self):
        client = FakeLLMClient(content='[{"itemId": "A"}]')
        with pytest.raises(ValueError):
            asyncio.run(client.generate_json("prompt"))

    def test_generate_json_keeps_usage(self):
        client = FakeLLMClient(content='{"items": []}')
        response = asyncio.run(client.generate_json("prompt"))

        assert response.data == {"items": []}
        assert response.total_tokens == 1500
        assert response.usage() == {
            "provider": "anthropic",
            "model": "fake-model",
            "tokens_input": 1000,
            "tokens_output": 500,
            "cost_usd": 0.0105,
        }

    def test_estimate_cost(self):
        assert estimate_cost("gpt-4o-mini", 1_000_000, 1_000_000) == 0.75
        assert estimate_cost("claude-3-5-haiku-20241022", 2000, 1000) == 0.0056
        assert estimate_cost("unknown-model", 1000, 500) == 0.0105


    def test_factory_without_keys(self, monkeypatch):
        for key in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GPT_API_KEY"):
            monkeypatch.delenv(key, raising=False)
        with pytest.raises(ValueError):
            get_llm_client()

    def test_factory_prefers_anthropic(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_llm_client().__class__.__name__ == "AnthropicClient"
        assert get_llm_client(provider="openai").__class__.__name__ == "OpenAIClient"


class TestRationaleGenerator:

    def setup_method(self):
        self.ranked = rank_items([make_item("A", reach=100), make_item("B", reach=900)], "month")

    def run(self, client):
        generator = RationaleGenerator(llm_client=client)
        return asyncio.run(generator.generate_notes(self.ranked, "month", "days"))

    def test_valid_answer(self):
        payload = {
            "meta": {"confidenceNote": "Medium", "assumptions": ["Reach is monthly"], "clarifyingQuestions": []},
            "items": [note_for("A"), note_for("B")],
        }
        notes, ai_used = self.run(FakeLLMClient(content=json.dumps(payload)))

        assert ai_used is True
        assert notes.meta.confidence_note == "Medium"
        assert [n.item_id for n in notes.items] == ["A", "B"]

    def test_fenced_answer(self):
        payload = {"meta": {"confidenceNote": "ok"}, "items": [note_for("A")]}
        notes, ai_used = self.run(FakeLLMClient(content="```json\n" + json.dumps(payload) + "\n```"))

        assert ai_used is True
        assert notes.items[0].item_id == "A"

    def test_default_confidence_note(self):
        payload = {"meta": {"confidenceNote": ""}, "items": [note_for("A")]}
        notes, _ = self.run(FakeLLMClient(content=json.dumps(payload)))
        assert notes.meta.confidence_note == "Rationale generated with AI (fake-model)."

    def test_invalid_json_falls_back(self):
        notes, ai_used = self.run(FakeLLMClient(content="not json"))

        assert ai_used is False
        assert notes.meta.confidence_note == AI_UNAVAILABLE_NOTE
        assert [n.item_id for n in notes.items] == ["B", "A"]

    def test_off_schema_answer_falls_back(self):
        payload = {"meta": {}, "items": [note_for("A", step_type="launch")]}
        notes, ai_used = self.run(FakeLLMClient(content=json.dumps(payload)))

        assert ai_used is False
        assert notes.items[0].rationale.why_this_rank == FALLBACK_WHY

    def test_provider_error_falls_back(self):
        notes, ai_used = self.run(FakeLLMClient(error=RuntimeError("quota exceeded")))

        assert ai_used is False
        assert len(notes.items) == 2

    def test_missing_keys_fall_back(self, monkeypatch):
        for key in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GPT_API_KEY"):
            monkeypatch.delenv(key, raising=False)
        generator = RationaleGenerator()

        notes, ai_used = asyncio.run(generator.generate_notes(self.ranked, "month", "days"))
        assert ai_used is False
        assert notes.meta.confidence_note == AI_UNAVAILABLE_NOTE

    def test_prompt_content(self):
        client = FakeLLMClient(content=json.dumps({"items": []}))
        self.run(client)

        system, prompt = client.prompts[0]
        assert "senior product manager" in system
        assert "Do NOT change ranks or scores" in prompt
        assert "Timeframe: month" in prompt
        assert "Effort unit: days" in prompt
        assert '"itemId": "B"' in prompt

    def test_sanitized_view_has_no_rationale(self):
        view = sanitize_for_model(self.ranked)
        assert set(view[0]) == {"itemId", "title", "description", "evidence", "inputs", "computed"}
        assert view[0]["computed"] == {"riceScore": 90.0, "rank": 1}

    def test_prompt_lists_items_in_ranked_order(self):
        prompt = build_rationale_prompt(self.ranked, "week", "points")
        assert prompt.index('"itemId": "B"') < prompt.index('"itemId": "A"')

    def test_usage_logged(self, caplog):
        payload = {"meta": {"confidenceNote": "ok"}, "items": [note_for("A")]}
        generator = RationaleGenerator(llm_client=FakeLLMClient(content=json.dumps(payload)))

        with caplog.at_level(logging.INFO, logger="ricerank.ai.rationale_generator"):
            asyncio.run(generator.generate_notes(self.ranked, "month", "days", run_id="r1"))

        record = [r for r in caplog.records if r.name == "ricerank.ai.rationale_generator"][-1]
        assert record.run_id == "r1"
        assert record.item_count == 2
        assert record.tokens_input == 1000
        assert record.tokens_output == 500
        assert record.cost_usd == 0.0105
        assert record.provider == "anthropic"
