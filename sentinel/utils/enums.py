"""
sentinel.utils.enums — All enumerations used across the Sentinel system.
"""

from enum import Enum, auto


class VerdictType(Enum):
    """Governance verdicts, ordered from most to least permissive."""

    APPROVE = "APPROVE"
    APPROVE_WITH_NOTICE = "APPROVE_WITH_NOTICE"
    ASK_FOR_CLARIFICATION = "ASK_FOR_CLARIFICATION"
    MODIFY = "MODIFY"
    BLOCK = "BLOCK"


class RiskDimension(Enum):
    """The six axes a plan is scored on. Values are the wire keys."""

    IRREVERSIBILITY = "irreversibility"
    EXTERNAL_IMPACT = "external_impact"
    FINANCIAL = "financial"
    SAFETY = "safety"
    MISSING_CONTEXT = "missing_context"
    POLICY_VIOLATION = "policy_violation"


class WorkflowState(Enum):
    """States of the operator workflow (input → plan → verdict)."""

    AWAITING_INPUT = auto()
    GENERATING_PLAN = auto()
    PLAN_READY = auto()
    ASSESSING_RISK = auto()
    VERDICT_READY = auto()


class AgentRole(Enum):
    """Which upstream capability an agent call addresses."""

    WORKER = "worker"  # task description → plan
    SENTINEL = "sentinel"  # plan → risk scores
