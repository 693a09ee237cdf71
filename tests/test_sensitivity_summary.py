"""
Tests for sensitivity analysis and the summary builder.

Usage:
    pytest tests/test_sensitivity_summary.py -v
"""

from ricerank.data.samples import SAMPLE_SAAS
from ricerank.scoring.rice_models import (
    BacklogItem,
    ComputedScore,
    RankedItem,
    ReachInput,
    RiceInputs,
)
from ricerank.scoring.rice_scorer import rank_items
from ricerank.scoring.sensitivity import calculate_sensitivity, sensitivity_by_item
from ricerank.scoring.summary import build_summary


def make_item(item_id="I1", reach=100, impact=1, confidence=50, effort=5):
    return BacklogItem(
        item_id=item_id,
        title=f"Item {item_id}",
        inputs=RiceInputs(
            reach=ReachInput(value=reach, timeframe="month"),
            impact=impact,
            confidence=confidence,
            effort=effort,
        ),
    )


def rank_one(**kwargs) -> RankedItem:
    return rank_items([make_item(**kwargs)], "month")[0]


class TestSensitivity:
    """Single-factor perturbations."""

    def test_reference_item(self):
        """reach=100, impact=1, confidence=50, effort=5"""
        s = calculate_sensitivity(rank_one())

        assert s.base_score == 10.0
        assert s.confidence_minus_20 == 6.0
        assert s.confidence_plus_20 == 14.0
        assert s.effort_minus_20 == 12.5
        assert s.effort_plus_20 == 8.33
        assert s.reach_minus_20 == 8.0

    def test_confidence_floor_clamped(self):
        """confidence=10 -> 10-20 clamps to 0 before scoring."""
        s = calculate_sensitivity(rank_one(confidence=10))
        assert s.confidence_minus_20 == 0.0

    def test_confidence_ceiling_clamped(self):
        s = calculate_sensitivity(rank_one(confidence=95))
        assert s.confidence_plus_20 == rank_one(confidence=100).rice_score

    def test_base_score_not_recomputed(self):
        ranked = rank_one()
        stale = RankedItem(
            item_id=ranked.item_id,
            title=ranked.title,
            description="",
            evidence="",
            inputs=ranked.inputs,
            computed=ComputedScore(rice_score=999.0, rank=1),
        )

        s = calculate_sensitivity(stale)
        assert s.base_score == 999.0
        assert s.reach_minus_20 == 8.0

    def test_no_reach_plus_scenario(self):
        keys = set(calculate_sensitivity(rank_one()).to_dict())
        assert keys == {
            "baseScore", "confidenceMinus20", "confidencePlus20",
            "effortMinus20", "effortPlus20", "reachMinus20",
        }

    def test_effort_direction(self):
        s = calculate_sensitivity(rank_one(effort=10))
        assert s.effort_minus_20 > s.base_score > s.effort_plus_20

    def test_by_item_keeps_ranked_order(self):
        ranked = rank_items([make_item("A", reach=10), make_item("B", reach=1000)], "month")
        assert list(sensitivity_by_item(ranked)) == ["B", "A"]


class TestSummary:
    """Curated lists over the SaaS sample backlog."""

    def setup_method(self):
        items = [BacklogItem.from_dict(it) for it in SAMPLE_SAAS]
        self.ranked = rank_items(items, "month")

    def test_sample_ranking_order(self):
        # 1583.33, 510, 400, 168, 103.85, 68.57, 44.12, 34.29
        assert [it.item_id for it in self.ranked] == ["I1", "I2", "I5", "I4", "I3", "I6", "I8", "I7"]

    def test_top3(self):
        assert build_summary(self.ranked).top3 == ["I1", "I2", "I5"]

    def test_quick_wins(self):
        assert build_summary(self.ranked).quick_wins == ["I1", "I5", "I4"]

    def test_high_risk_high_reward(self):
        assert build_summary(self.ranked).high_risk_high_reward == ["I6", "I8", "I7"]

    def test_containment(self):
        by_id = {it.item_id: it for it in self.ranked}
        summary = build_summary(self.ranked)

        for item_id in summary.quick_wins:
            assert by_id[item_id].rice_score >= 20
            assert by_id[item_id].inputs.effort <= 8
        for item_id in summary.high_risk_high_reward:
            assert by_id[item_id].inputs.confidence <= 60
            assert by_id[item_id].inputs.impact >= 2

    def test_lists_capped_at_three(self):
        items = [make_item(f"Q{n}", reach=1000, impact=2, confidence=50, effort=2) for n in range(6)]
        summary = build_summary(rank_items(items, "month"))

        assert summary.top3 == ["Q0", "Q1", "Q2"]
        assert summary.quick_wins == ["Q0", "Q1", "Q2"]
        assert summary.high_risk_high_reward == ["Q0", "Q1", "Q2"]

    def test_thresholds_inclusive(self):
        edge = make_item("EDGE", reach=160, impact=2, confidence=50, effort=8)   # 20.0, effort 8
        heavy = make_item("HEAVY", reach=1000, impact=1, confidence=100, effort=8.01)
        risky = make_item("RISKY", reach=10, impact=2, confidence=60, effort=50)
        sure = make_item("SURE", reach=10, impact=2, confidence=61, effort=50)
        summary = build_summary(rank_items([edge, heavy, risky, sure], "month"))

        assert summary.quick_wins == ["EDGE"]
        assert "RISKY" in summary.high_risk_high_reward
        assert "SURE" not in summary.high_risk_high_reward

    def test_item_can_be_in_several_lists(self):
        item = make_item("BOTH", reach=1000, impact=3, confidence=40, effort=2)
        summary = build_summary(rank_items([item], "month"))

        assert summary.top3 == ["BOTH"]
        assert summary.quick_wins == ["BOTH"]
        assert summary.high_risk_high_reward == ["BOTH"]

    def test_empty_backlog(self):
        summary = build_summary([])
        assert summary.to_dict() == {"top3": [], "quickWins": [], "highRiskHighReward": []}
