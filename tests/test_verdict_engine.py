"""
Tests for sentinel.policy.verdict_engine — hard overrides, weighted score,
confidence and the threshold ladder.
"""

import itertools

import pytest

from sentinel.policy.verdict_engine import (
    HARD_OVERRIDES,
    THRESHOLD_LADDER,
    WEIGHTS,
    confidence_for,
    evaluate,
    first_match,
    weighted_score,
)
from sentinel.utils.enums import VerdictType
from sentinel.utils.types import RiskScores, Verdict


# ── Helpers ──────────────────────────────────────────────────────────────


def make_scores(**overrides) -> RiskScores:
    values = dict(
        irreversibility=0,
        external_impact=0,
        financial=0,
        safety=0,
        missing_context=0,
        policy_violation=0,
    )
    values.update(overrides)
    return RiskScores(**values)


def ladder(weighted: float, **overrides) -> VerdictType:
    rule = first_match(THRESHOLD_LADDER, make_scores(**overrides), weighted)
    return rule.verdict


ALL_SCORES = [
    RiskScores(*combo) for combo in itertools.product(range(4), repeat=6)
]


def _any_override(s: RiskScores) -> bool:
    return (
        s.safety >= 3
        or (s.irreversibility >= 3 and s.external_impact >= 2)
        or s.policy_violation >= 3
    )


# ── Weights ──────────────────────────────────────────────────────────────


class TestWeights:
    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_zero_scores_weigh_zero(self):
        assert weighted_score(make_scores()) == 0.0

    def test_formula(self):
        s = make_scores(
            irreversibility=1,
            external_impact=2,
            financial=3,
            safety=1,
            missing_context=2,
            policy_violation=1,
        )
        expected = 0.25 * 1 + 0.25 * 2 + 0.15 * 3 + 0.20 * 1 + 0.10 * 2 + 0.05 * 1
        assert weighted_score(s) == pytest.approx(expected)

    def test_max_scores_weigh_three(self):
        s = RiskScores(3, 3, 3, 3, 3, 3)
        assert weighted_score(s) == pytest.approx(3.0)


# ── Confidence ───────────────────────────────────────────────────────────


class TestConfidence:
    def test_zero_risk_full_confidence(self):
        assert confidence_for(0.0) == 100.0

    def test_max_risk_zero_confidence(self):
        assert confidence_for(3.0) == pytest.approx(0.0)

    def test_midpoint(self):
        assert confidence_for(1.5) == pytest.approx(50.0)

    def test_clamped_above_range(self):
        assert confidence_for(4.5) == 0.0

    def test_clamped_below_range(self):
        assert confidence_for(-1.0) == 100.0

    def test_monotonically_decreasing(self):
        values = [confidence_for(w / 20) for w in range(0, 61)]
        assert values == sorted(values, reverse=True)


# ── Hard Overrides ───────────────────────────────────────────────────────


class TestHardOverrides:
    def test_safety_blocks(self):
        v = evaluate(make_scores(safety=3))
        assert v.type == VerdictType.BLOCK
        assert v.confidence == 100
        assert v.weighted_score == 0
        assert v.triggered_rules == ("CRITICAL: Safety score ≥ 3",)

    def test_irreversible_and_external_blocks(self):
        v = evaluate(make_scores(irreversibility=3, external_impact=2))
        assert v.type == VerdictType.BLOCK
        assert v.triggered_rules == (
            "CRITICAL: Irreversibility ≥ 3 AND External Impact ≥ 2",
        )
        assert v.weighted_score == 0
        assert v.confidence == 100

    def test_irreversible_without_external_is_not_override(self):
        v = evaluate(make_scores(irreversibility=3, external_impact=1))
        assert v.type == VerdictType.APPROVE_WITH_NOTICE
        assert v.weighted_score == pytest.approx(1.0)

    def test_external_without_irreversible_is_not_override(self):
        v = evaluate(make_scores(irreversibility=2, external_impact=3))
        assert not v.triggered_rules[0].startswith("CRITICAL")

    def test_policy_blocks(self):
        v = evaluate(make_scores(policy_violation=3))
        assert v.type == VerdictType.BLOCK
        assert v.triggered_rules == ("CRITICAL: Policy Violation ≥ 3",)
        assert v.weighted_score == 0

    def test_safety_checked_first(self):
        v = evaluate(
            make_scores(
                safety=3, irreversibility=3, external_impact=3, policy_violation=3
            )
        )
        assert v.triggered_rules == ("CRITICAL: Safety score ≥ 3",)

    def test_irreversibility_before_policy(self):
        v = evaluate(
            make_scores(irreversibility=3, external_impact=2, policy_violation=3)
        )
        assert v.triggered_rules == (
            "CRITICAL: Irreversibility ≥ 3 AND External Impact ≥ 2",
        )

    def test_override_table_order(self):
        assert [r.name for r in HARD_OVERRIDES] == [
            "CRITICAL: Safety score ≥ 3",
            "CRITICAL: Irreversibility ≥ 3 AND External Impact ≥ 2",
            "CRITICAL: Policy Violation ≥ 3",
        ]
        assert all(r.verdict == VerdictType.BLOCK for r in HARD_OVERRIDES)

    def test_each_override_matches_independently(self):
        safety, irreversible, policy = HARD_OVERRIDES
        assert safety.matches(make_scores(safety=3))
        assert not safety.matches(make_scores(safety=2))
        assert irreversible.matches(make_scores(irreversibility=3, external_impact=2))
        assert not irreversible.matches(make_scores(irreversibility=3))
        assert policy.matches(make_scores(policy_violation=3))
        assert not policy.matches(make_scores(policy_violation=2))

    def test_out_of_range_still_overrides(self):
        v = evaluate(make_scores(safety=5))
        assert v.type == VerdictType.BLOCK
        assert v.triggered_rules == ("CRITICAL: Safety score ≥ 3",)


# ── Threshold Ladder ─────────────────────────────────────────────────────


class TestThresholdLadder:
    def test_zero_approves(self):
        assert ladder(0.0) == VerdictType.APPROVE

    def test_just_below_one_approves(self):
        assert ladder(0.99) == VerdictType.APPROVE

    def test_one_is_notice(self):
        assert ladder(1.0) == VerdictType.APPROVE_WITH_NOTICE

    def test_just_below_one_and_half_is_notice(self):
        assert ladder(1.49) == VerdictType.APPROVE_WITH_NOTICE

    def test_one_and_half_without_missing_context_modifies(self):
        assert ladder(1.5, missing_context=1) == VerdictType.MODIFY

    def test_one_and_half_with_missing_context_asks(self):
        assert ladder(1.5, missing_context=2) == VerdictType.ASK_FOR_CLARIFICATION

    def test_just_below_two_modifies(self):
        assert ladder(1.99) == VerdictType.MODIFY

    def test_two_blocks(self):
        assert ladder(2.0) == VerdictType.BLOCK

    def test_missing_context_beats_block(self):
        assert ladder(2.8, missing_context=2) == VerdictType.ASK_FOR_CLARIFICATION

    def test_missing_context_ignored_below_one_and_half(self):
        assert ladder(0.5, missing_context=3) == VerdictType.APPROVE
        assert ladder(1.2, missing_context=3) == VerdictType.APPROVE_WITH_NOTICE

    def test_ladder_order(self):
        assert [r.verdict for r in THRESHOLD_LADDER] == [
            VerdictType.APPROVE,
            VerdictType.APPROVE_WITH_NOTICE,
            VerdictType.ASK_FOR_CLARIFICATION,
            VerdictType.MODIFY,
            VerdictType.BLOCK,
        ]

    def test_rule_names(self):
        assert first_match(THRESHOLD_LADDER, make_scores(), 0.2).name == (
            "Weighted score < 1.0"
        )
        assert first_match(THRESHOLD_LADDER, make_scores(), 1.2).name == (
            "Weighted score < 1.5"
        )
        assert first_match(
            THRESHOLD_LADDER, make_scores(missing_context=2), 1.7
        ).name == ("Missing Context ≥ 2")
        assert first_match(THRESHOLD_LADDER, make_scores(), 1.7).name == (
            "Weighted score < 2.0"
        )
        assert first_match(THRESHOLD_LADDER, make_scores(), 2.5).name == (
            "Weighted score ≥ 2.0"
        )

    def test_first_match_none_on_empty_table(self):
        assert first_match((), make_scores(), 1.0) is None


# ── End-to-end evaluate ──────────────────────────────────────────────────


class TestEvaluate:
    def test_all_zero(self):
        v = evaluate(make_scores())
        assert v == Verdict(
            type=VerdictType.APPROVE,
            confidence=100.0,
            weighted_score=0.0,
            triggered_rules=("Weighted score < 1.0",),
        )

    def test_all_max_hits_safety_override(self):
        v = evaluate(RiskScores(3, 3, 3, 3, 3, 3))
        assert v.type == VerdictType.BLOCK
        assert v.confidence == 100
        assert v.weighted_score == 0
        assert v.triggered_rules == ("CRITICAL: Safety score ≥ 3",)

    def test_missing_context_not_consulted_below_one(self):
        v = evaluate(
            make_scores(
                irreversibility=1, external_impact=1, financial=1, missing_context=3
            )
        )
        assert v.weighted_score == pytest.approx(0.95)
        assert v.type == VerdictType.APPROVE
        assert v.triggered_rules == ("Weighted score < 1.0",)

    def test_notice(self):
        v = evaluate(make_scores(irreversibility=2, external_impact=2))
        assert v.weighted_score == pytest.approx(1.0)
        assert v.type == VerdictType.APPROVE_WITH_NOTICE

    def test_modify(self):
        v = evaluate(
            make_scores(irreversibility=2, external_impact=2, financial=2, safety=2)
        )
        assert v.weighted_score == pytest.approx(1.7)
        assert v.type == VerdictType.MODIFY
        assert v.triggered_rules == ("Weighted score < 2.0",)

    def test_weighted_block(self):
        v = evaluate(
            make_scores(
                irreversibility=2,
                external_impact=3,
                financial=3,
                safety=2,
                missing_context=1,
                policy_violation=2,
            )
        )
        assert v.weighted_score == pytest.approx(2.3)
        assert v.type == VerdictType.BLOCK
        assert v.triggered_rules == ("Weighted score ≥ 2.0",)
        assert v.confidence == pytest.approx(100 - 2.3 / 3 * 100)

    def test_missing_context_preempts_weighted_block(self):
        v = evaluate(
            make_scores(
                irreversibility=2,
                external_impact=3,
                financial=3,
                safety=2,
                missing_context=2,
                policy_violation=2,
            )
        )
        assert v.weighted_score == pytest.approx(2.4)
        assert v.type == VerdictType.ASK_FOR_CLARIFICATION
        assert v.triggered_rules == ("Missing Context ≥ 2",)

    def test_idempotent(self):
        s = make_scores(irreversibility=2, financial=3, missing_context=2)
        assert evaluate(s) == evaluate(s)

    def test_input_not_mutated(self):
        s = make_scores(safety=2, financial=1)
        before = s.to_dict()
        evaluate(s)
        assert s.to_dict() == before

    def test_out_of_range_does_not_raise(self):
        v = evaluate(make_scores(financial=9))
        assert v.weighted_score == pytest.approx(1.35)


# ── Whole input space ────────────────────────────────────────────────────


class TestInputSpace:
    """Every well-formed assessment (4^6 of them)."""

    def test_exactly_one_rule_every_time(self):
        for s in ALL_SCORES:
            assert len(evaluate(s).triggered_rules) == 1

    def test_overrides_block_with_full_confidence(self):
        for s in ALL_SCORES:
            if _any_override(s):
                v = evaluate(s)
                assert v.type == VerdictType.BLOCK
                assert v.confidence == 100
                assert v.weighted_score == 0

    def test_non_override_score_and_confidence(self):
        for s in ALL_SCORES:
            if _any_override(s):
                continue
            v = evaluate(s)
            expected = (
                0.25 * s.irreversibility
                + 0.25 * s.external_impact
                + 0.15 * s.financial
                + 0.20 * s.safety
                + 0.10 * s.missing_context
                + 0.05 * s.policy_violation
            )
            assert v.weighted_score == pytest.approx(expected)
            assert 0.0 <= v.weighted_score <= 3.0
            assert v.confidence == pytest.approx(
                max(0.0, min(100.0, 100 - expected / 3 * 100))
            )
            assert 0.0 <= v.confidence <= 100.0

    def test_missing_context_precedence(self):
        for s in ALL_SCORES:
            if _any_override(s) or s.missing_context < 2:
                continue
            v = evaluate(s)
            if v.weighted_score >= 1.5:
                assert v.type == VerdictType.ASK_FOR_CLARIFICATION
