"""
sentinel.utils — Shared configuration, enumerations and common types.
"""

from sentinel.utils.enums import (
    VerdictType,
    RiskDimension,
    WorkflowState,
    AgentRole,
)
from sentinel.utils.config import SentinelConfig

__all__ = [
    "VerdictType",
    "RiskDimension",
    "WorkflowState",
    "AgentRole",
    "SentinelConfig",
]
