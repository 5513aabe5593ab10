"""
sentinel.utils.types — Core dataclasses used across all modules.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from sentinel.utils.enums import RiskDimension, VerdictType, WorkflowState


def _uid() -> str:
    return str(uuid.uuid4())


def _now() -> float:
    return time.time()


DIMENSION_KEYS: tuple[str, ...] = tuple(d.value for d in RiskDimension)


# ── Risk Assessment ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RiskScores:
    """Six risk dimensions, each 0 (none) to 3 (critical).

    Range is the producer's contract; nothing here enforces it.
    """

    irreversibility: int
    external_impact: int
    financial: int
    safety: int
    missing_context: int
    policy_violation: int

    def get(self, dimension: RiskDimension) -> int:
        return getattr(self, dimension.value)

    def to_dict(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in DIMENSION_KEYS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskScores":
        return cls(**{key: data[key] for key in DIMENSION_KEYS})


@dataclass(frozen=True)
class RiskExplanations:
    """Human-readable justification for each risk dimension. Display only."""

    irreversibility: str = ""
    external_impact: str = ""
    financial: str = ""
    safety: str = ""
    missing_context: str = ""
    policy_violation: str = ""

    def get(self, dimension: RiskDimension) -> str:
        return getattr(self, dimension.value)

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in DIMENSION_KEYS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskExplanations":
        return cls(**{key: str(data[key]) for key in DIMENSION_KEYS})


@dataclass(frozen=True)
class SentinelResult:
    risk_scores: RiskScores
    risk_explanations: RiskExplanations

    def to_dict(self) -> dict:
        return {
            "risk_scores": self.risk_scores.to_dict(),
            "risk_explanations": self.risk_explanations.to_dict(),
        }


# ── Verdict ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Verdict:
    type: VerdictType
    confidence: float
    weighted_score: float
    triggered_rules: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "weightedScore": self.weighted_score,
            "triggeredRules": list(self.triggered_rules),
        }


# ── Plans ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PlanStep:
    step_number: int
    action: str
    action_tag: str = ""
    concerns: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "step_number": self.step_number,
            "action": self.action,
            "action_tag": self.action_tag,
            "concerns": list(self.concerns),
        }


@dataclass(frozen=True)
class WorkerPlan:
    steps: tuple[PlanStep, ...]
    resources_needed: tuple[str, ...] = ()
    external_systems: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "resources_needed": list(self.resources_needed),
            "external_systems": list(self.external_systems),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkerPlan":
        """Build from the worker payload; a non-numeric step_number raises ValueError."""
        steps = []
        for i, raw in enumerate(data.get("steps") or []):
            steps.append(
                PlanStep(
                    step_number=int(raw.get("step_number", i + 1)),
                    action=str(raw.get("action", "")),
                    action_tag=str(raw.get("action_tag", "")),
                    concerns=_str_tuple(raw.get("concerns")),
                )
            )
        return cls(
            steps=tuple(steps),
            resources_needed=_str_tuple(data.get("resources_needed")),
            external_systems=_str_tuple(data.get("external_systems")),
        )


def _str_tuple(value: Any) -> tuple[str, ...]:
    # Models sometimes send a single string where a list is expected
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


# ── Agent Transport ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AgentResponse:
    """Normalized reply from an upstream agent.

    `success` is the transport outcome; `status` is the agent's own
    discriminator. Only success + status == "success" carries a usable result.
    """

    success: bool
    status: str = "error"
    result: Optional[dict] = None
    message: str = ""
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.success and self.status == "success"


# ── Workflow ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Read-only view of the orchestrator at one point in time."""

    state: WorkflowState
    task: str = ""
    plan: Optional[WorkerPlan] = None
    assessment: Optional[SentinelResult] = None
    verdict: Optional[Verdict] = None
    error: Optional[str] = None
    correlation_id: str = field(default_factory=_uid)
    timestamp: float = field(default_factory=_now)
