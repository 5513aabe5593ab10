"""
sentinel.policy.verdict_engine — Deterministic verdict policy.

Converts a six-dimension risk assessment into one governance verdict.

Two-stage model:
  Stage 1: Hard overrides — categorical BLOCK conditions, checked in order
  Stage 2: Weighted score — severity scalar in [0, 3] mapped onto a
           threshold ladder

Five verdicts:
  APPROVE                 weighted < 1.0
  APPROVE_WITH_NOTICE     weighted < 1.5
  ASK_FOR_CLARIFICATION   missing_context >= 2 (checked before MODIFY/BLOCK)
  MODIFY                  weighted < 2.0
  BLOCK                   otherwise, or any hard override

Both stages are ordered rule tables; the first matching rule wins and is the
single entry in Verdict.triggered_rules. The engine is pure: no I/O, no
state, no validation of score ranges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from sentinel.utils.enums import RiskDimension, VerdictType
from sentinel.utils.types import RiskScores, Verdict

logger = logging.getLogger(__name__)


# ── Weights ──────────────────────────────────────────────────────────────────

# Iteration order is the summation order. Weights sum to 1.0, so a
# well-formed assessment always lands in [0, 3].
WEIGHTS: dict[RiskDimension, float] = {
    RiskDimension.IRREVERSIBILITY: 0.25,
    RiskDimension.EXTERNAL_IMPACT: 0.25,
    RiskDimension.FINANCIAL: 0.15,
    RiskDimension.SAFETY: 0.2,
    RiskDimension.MISSING_CONTEXT: 0.1,
    RiskDimension.POLICY_VIOLATION: 0.05,
}

MAX_DIMENSION_SCORE = 3
OVERRIDE_CONFIDENCE = 100.0


def weighted_score(scores: RiskScores) -> float:
    """Weighted severity of an assessment, 0.0 (benign) to 3.0 (critical)."""
    return sum(scores.get(dim) * weight for dim, weight in WEIGHTS.items())


def confidence_for(weighted: float) -> float:
    """Map a weighted score onto a 0-100 confidence, 100 at zero risk."""
    return max(0.0, min(100.0, 100 - (weighted / MAX_DIMENSION_SCORE) * 100))


# ── Rule Tables ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PolicyRule:
    """One row of a rule table: the rule text is what gets reported."""

    name: str
    verdict: VerdictType
    predicate: Callable[[RiskScores, float], bool]

    def matches(self, scores: RiskScores, weighted: float = 0.0) -> bool:
        return self.predicate(scores, weighted)


HARD_OVERRIDES: tuple[PolicyRule, ...] = (
    PolicyRule(
        "CRITICAL: Safety score ≥ 3",
        VerdictType.BLOCK,
        lambda s, _w: s.safety >= 3,
    ),
    PolicyRule(
        "CRITICAL: Irreversibility ≥ 3 AND External Impact ≥ 2",
        VerdictType.BLOCK,
        lambda s, _w: s.irreversibility >= 3 and s.external_impact >= 2,
    ),
    PolicyRule(
        "CRITICAL: Policy Violation ≥ 3",
        VerdictType.BLOCK,
        lambda s, _w: s.policy_violation >= 3,
    ),
)

# Missing context is consulted before the MODIFY threshold, so it pre-empts
# MODIFY and BLOCK at any weighted score >= 1.5.
# TODO: confirm this ordering with the policy owner before changing it.
THRESHOLD_LADDER: tuple[PolicyRule, ...] = (
    PolicyRule(
        "Weighted score < 1.0",
        VerdictType.APPROVE,
        lambda _s, w: w < 1.0,
    ),
    PolicyRule(
        "Weighted score < 1.5",
        VerdictType.APPROVE_WITH_NOTICE,
        lambda _s, w: w < 1.5,
    ),
    PolicyRule(
        "Missing Context ≥ 2",
        VerdictType.ASK_FOR_CLARIFICATION,
        lambda s, _w: s.missing_context >= 2,
    ),
    PolicyRule(
        "Weighted score < 2.0",
        VerdictType.MODIFY,
        lambda _s, w: w < 2.0,
    ),
    PolicyRule(
        "Weighted score ≥ 2.0",
        VerdictType.BLOCK,
        lambda _s, _w: True,
    ),
)


def first_match(
    rules: Iterable[PolicyRule], scores: RiskScores, weighted: float = 0.0
) -> Optional[PolicyRule]:
    """Return the first rule whose predicate holds, or None."""
    for rule in rules:
        if rule.matches(scores, weighted):
            return rule
    return None


# ── Evaluation ───────────────────────────────────────────────────────────────


def evaluate(scores: RiskScores) -> Verdict:
    """Classify a risk assessment. Total over well-formed input."""
    override = first_match(HARD_OVERRIDES, scores)
    if override is not None:
        logger.debug("Hard override fired: %s", override.name)
        return Verdict(
            type=override.verdict,
            confidence=OVERRIDE_CONFIDENCE,
            weighted_score=0.0,
            triggered_rules=(override.name,),
        )

    weighted = weighted_score(scores)
    confidence = confidence_for(weighted)

    # The ladder ends in a catch-all, so a rule always matches
    rule = first_match(THRESHOLD_LADDER, scores, weighted)

    logger.debug(
        "Verdict %s: weighted=%.2f confidence=%.1f rule=%s",
        rule.verdict.name,
        weighted,
        confidence,
        rule.name,
    )
    return Verdict(
        type=rule.verdict,
        confidence=confidence,
        weighted_score=weighted,
        triggered_rules=(rule.name,),
    )
