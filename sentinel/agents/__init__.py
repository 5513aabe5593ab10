"""
sentinel.agents — Worker and sentinel agent clients and their transports.
"""

from sentinel.agents.capabilities import (
    AgentError,
    PlanGenerator,
    RiskAssessor,
    RiskDataError,
    SentinelError,
)
from sentinel.agents.transport import (
    HttpAgentTransport,
    OllamaAgentTransport,
    build_transport,
)

__all__ = [
    "AgentError",
    "PlanGenerator",
    "RiskAssessor",
    "RiskDataError",
    "SentinelError",
    "HttpAgentTransport",
    "OllamaAgentTransport",
    "build_transport",
]
