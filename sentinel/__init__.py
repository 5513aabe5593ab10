"""
Sentinel — turns an AI-generated plan's risk assessment into a governance verdict.
"""

from sentinel.policy.verdict_engine import evaluate
from sentinel.utils.enums import VerdictType
from sentinel.utils.types import RiskScores, Verdict

__version__ = "0.1.0"

__all__ = ["evaluate", "RiskScores", "Verdict", "VerdictType"]
