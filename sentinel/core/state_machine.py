"""
sentinel.core.state_machine — Workflow state machine with guarded transitions.
"""

from __future__ import annotations

import logging
import threading
import time

from sentinel.utils.enums import WorkflowState

logger = logging.getLogger(__name__)


class IllegalStateTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current: WorkflowState, target: WorkflowState):
        self.current = current
        self.target = target
        super().__init__(f"Illegal transition: {current.name} → {target.name}")


# Valid transitions map: current_state → set of allowed next states
_TRANSITIONS: dict[WorkflowState, set[WorkflowState]] = {
    WorkflowState.AWAITING_INPUT: {
        WorkflowState.GENERATING_PLAN,
    },
    WorkflowState.GENERATING_PLAN: {
        WorkflowState.PLAN_READY,
        WorkflowState.AWAITING_INPUT,  # worker failed
    },
    WorkflowState.PLAN_READY: {
        WorkflowState.ASSESSING_RISK,
        WorkflowState.GENERATING_PLAN,  # re-plan with a new task
    },
    WorkflowState.ASSESSING_RISK: {
        WorkflowState.VERDICT_READY,
        WorkflowState.PLAN_READY,  # sentinel failed, plan is kept
    },
    WorkflowState.VERDICT_READY: {
        WorkflowState.GENERATING_PLAN,  # new task without explicit reset
    },
}


class WorkflowStateMachine:
    """
    Owns the operator workflow: awaiting input → plan ready → verdict ready.
    Invalid transitions raise IllegalStateTransition; reset() is always allowed.
    """

    def __init__(self):
        self._state = WorkflowState.AWAITING_INPUT
        self._last_transition_time = time.time()
        self._transition_log: list[tuple[float, WorkflowState, WorkflowState]] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def time_in_state(self) -> float:
        return time.time() - self._last_transition_time

    def transition(self, target: WorkflowState) -> WorkflowState:
        """Move to target and return the previous state."""
        with self._lock:
            allowed = _TRANSITIONS.get(self._state, set())
            if target not in allowed:
                raise IllegalStateTransition(self._state, target)

            old = self._state
            self._state = target
            self._last_transition_time = time.time()
            self._transition_log.append((self._last_transition_time, old, target))
            logger.info("State: %s → %s", old.name, target.name)
            return old

    def reset(self) -> WorkflowState:
        """Return to AWAITING_INPUT from any state."""
        with self._lock:
            old = self._state
            self._state = WorkflowState.AWAITING_INPUT
            self._last_transition_time = time.time()
            self._transition_log.append(
                (self._last_transition_time, old, WorkflowState.AWAITING_INPUT)
            )
            logger.info("State reset: %s → AWAITING_INPUT", old.name)
            return old

    @property
    def history(self) -> list[tuple[float, WorkflowState, WorkflowState]]:
        return list(self._transition_log)

    def can_transition(self, target: WorkflowState) -> bool:
        return target in _TRANSITIONS.get(self._state, set())
