"""
sentinel.policy.guidance — Operator-facing wording for verdicts and risk dimensions.
"""

from __future__ import annotations

from sentinel.utils.enums import RiskDimension, VerdictType

REQUIRED_ACTIONS: dict[VerdictType, str] = {
    VerdictType.APPROVE: (
        "Task may proceed as planned. No additional approval required."
    ),
    VerdictType.APPROVE_WITH_NOTICE: (
        "Task may proceed with awareness of identified concerns. "
        "Monitor execution closely."
    ),
    VerdictType.ASK_FOR_CLARIFICATION: (
        "Provide additional context or clarification before proceeding. "
        "Missing critical information."
    ),
    VerdictType.MODIFY: (
        "Plan requires modifications to reduce risk. "
        "Review and revise the execution steps."
    ),
    VerdictType.BLOCK: (
        "Task execution is BLOCKED. Risk level unacceptable. "
        "Do not proceed without senior approval."
    ),
}

VERDICT_LABELS: dict[VerdictType, str] = {
    VerdictType.APPROVE: "Approve",
    VerdictType.APPROVE_WITH_NOTICE: "Approve with notice",
    VerdictType.ASK_FOR_CLARIFICATION: "Ask for clarification",
    VerdictType.MODIFY: "Modify",
    VerdictType.BLOCK: "Block",
}

DIMENSION_LABELS: dict[RiskDimension, str] = {
    RiskDimension.IRREVERSIBILITY: "Irreversibility",
    RiskDimension.EXTERNAL_IMPACT: "External Impact",
    RiskDimension.FINANCIAL: "Financial",
    RiskDimension.SAFETY: "Safety",
    RiskDimension.MISSING_CONTEXT: "Missing Context",
    RiskDimension.POLICY_VIOLATION: "Policy Violation",
}

RISK_LEVELS = ("none", "low", "elevated", "critical")


def _require_exhaustive(mapping: dict, enum_cls) -> None:
    missing = [m.name for m in enum_cls if m not in mapping]
    if missing:
        raise RuntimeError(
            f"{enum_cls.__name__} members without guidance: {', '.join(missing)}"
        )


_require_exhaustive(REQUIRED_ACTIONS, VerdictType)
_require_exhaustive(VERDICT_LABELS, VerdictType)
_require_exhaustive(DIMENSION_LABELS, RiskDimension)


def required_action(verdict_type: VerdictType) -> str:
    return REQUIRED_ACTIONS[verdict_type]


def verdict_label(verdict_type: VerdictType) -> str:
    return VERDICT_LABELS[verdict_type]


def dimension_label(dimension: RiskDimension) -> str:
    return DIMENSION_LABELS[dimension]


def risk_level(score: int) -> str:
    """Word for a single dimension score; anything above 3 reads as critical."""
    if score <= 0:
        return RISK_LEVELS[0]
    return RISK_LEVELS[min(score, len(RISK_LEVELS) - 1)]
