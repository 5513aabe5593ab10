"""
sentinel.agents.capabilities — The two upstream capabilities the workflow depends on.

  PlanGenerator  task description → WorkerPlan      (worker agent)
  RiskAssessor   WorkerPlan → SentinelResult        (sentinel agent)

Both make exactly one call per request and raise on failure; the orchestrator
decides what the operator sees.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sentinel.agents.transport import AgentTransport
from sentinel.utils.types import (
    DIMENSION_KEYS,
    RiskExplanations,
    RiskScores,
    SentinelResult,
    WorkerPlan,
)

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 3


class SentinelError(Exception):
    """Base class for errors surfaced to the operator."""


class AgentError(SentinelError):
    """An upstream agent could not be reached or reported failure."""

    def __init__(self, message: str, agent_id: str = ""):
        self.agent_id = agent_id
        super().__init__(message)


class RiskDataError(SentinelError):
    """The risk assessment broke the score contract (missing key, out of range)."""


class PlanGenerator:
    """Worker capability: asks the worker agent for an execution plan."""

    def __init__(self, transport: AgentTransport, agent_id: str):
        self.transport = transport
        self.agent_id = agent_id

    async def generate(self, task: str) -> WorkerPlan:
        response = await self.transport.send(task, self.agent_id)
        if not response.ok:
            raise AgentError(
                response.message or "Failed to generate plan", self.agent_id
            )

        raw = (response.result or {}).get("plan")
        if not isinstance(raw, dict) or not isinstance(raw.get("steps"), list):
            raise AgentError("Worker agent returned no usable plan", self.agent_id)
        if not all(isinstance(step, dict) for step in raw["steps"]):
            raise AgentError("Worker agent returned malformed plan steps", self.agent_id)

        try:
            plan = WorkerPlan.from_dict(raw)
        except (ValueError, TypeError) as e:
            logger.error("Unusable plan from worker: %s", e)
            raise AgentError(
                "Worker agent returned malformed plan steps", self.agent_id
            ) from e
        logger.info(
            "Plan received: %d steps, %d external systems",
            len(plan.steps),
            len(plan.external_systems),
        )
        return plan


def coerce_score(key: str, value: Any) -> int:
    """Return value as an int score in [MIN_SCORE, MAX_SCORE] or raise RiskDataError."""
    # bool is an int subclass; "true" is not a score
    if isinstance(value, bool):
        raise RiskDataError(f"Risk score '{key}' is not an integer: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise RiskDataError(f"Risk score '{key}' is not an integer: {value!r}")
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise RiskDataError(
            f"Risk score '{key}' out of range [{MIN_SCORE}, {MAX_SCORE}]: {value}"
        )
    return value


def parse_assessment(result: dict) -> SentinelResult:
    """Validate a sentinel payload and build a SentinelResult from it."""
    scores = result.get("risk_scores")
    explanations = result.get("risk_explanations")
    if not isinstance(scores, dict):
        raise RiskDataError("Assessment has no risk_scores")
    if not isinstance(explanations, dict):
        raise RiskDataError("Assessment has no risk_explanations")

    missing = [k for k in DIMENSION_KEYS if k not in scores]
    if missing:
        raise RiskDataError(f"Risk scores missing: {', '.join(missing)}")
    missing = [k for k in DIMENSION_KEYS if k not in explanations]
    if missing:
        raise RiskDataError(f"Risk explanations missing: {', '.join(missing)}")

    return SentinelResult(
        risk_scores=RiskScores.from_dict(
            {k: coerce_score(k, scores[k]) for k in DIMENSION_KEYS}
        ),
        risk_explanations=RiskExplanations.from_dict(explanations),
    )


class RiskAssessor:
    """Sentinel capability: asks the sentinel agent to score a plan."""

    def __init__(self, transport: AgentTransport, agent_id: str):
        self.transport = transport
        self.agent_id = agent_id

    async def assess(self, plan: WorkerPlan) -> SentinelResult:
        message = json.dumps({"plan": plan.to_dict()})
        response = await self.transport.send(message, self.agent_id)
        if not response.ok:
            raise AgentError(
                response.message or "Failed to evaluate plan", self.agent_id
            )

        assessment = parse_assessment(response.result or {})
        logger.info("Risk scores received: %s", assessment.risk_scores.to_dict())
        return assessment
