"""
sentinel.policy — Verdict policy engine and operator guidance.
"""

from sentinel.policy.verdict_engine import evaluate, weighted_score, confidence_for
from sentinel.policy.guidance import required_action, verdict_label

__all__ = [
    "evaluate",
    "weighted_score",
    "confidence_for",
    "required_action",
    "verdict_label",
]
