"""
sentinel.core — Workflow orchestration, state machine and progress event bus.
"""

from sentinel.core.event_bus import AsyncEventBus
from sentinel.core.state_machine import WorkflowStateMachine, IllegalStateTransition
from sentinel.core.orchestrator import GovernanceOrchestrator

__all__ = [
    "AsyncEventBus",
    "WorkflowStateMachine",
    "IllegalStateTransition",
    "GovernanceOrchestrator",
]
