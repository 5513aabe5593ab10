"""
sentinel.core.orchestrator — Drives the task → plan → risk → verdict pipeline.

Stage 1 (worker) must succeed before stage 2 (sentinel) starts, and only a
successful stage 2 reaches the verdict engine. A failure at either stage
leaves an operator-facing error message and never produces a verdict.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from sentinel.agents.capabilities import PlanGenerator, RiskAssessor, SentinelError
from sentinel.agents.transport import build_transport
from sentinel.core.event_bus import AsyncEventBus
from sentinel.core.state_machine import IllegalStateTransition, WorkflowStateMachine
from sentinel.observability.logger import TraceCollector, VerdictAuditLog
from sentinel.policy.verdict_engine import evaluate
from sentinel.utils.config import SentinelConfig
from sentinel.utils.enums import WorkflowState
from sentinel.utils.types import (
    RiskScores,
    SentinelResult,
    Verdict,
    WorkerPlan,
    WorkflowSnapshot,
)

logger = logging.getLogger(__name__)

EMPTY_TASK_MESSAGE = "Please enter a task description"
NETWORK_ERROR_MESSAGE = "Network error occurred"


class GovernanceOrchestrator:
    """
    Owns the workflow state and everything cached along the way
    (task, plan, assessment, verdict, last error).
    """

    def __init__(
        self,
        planner: PlanGenerator,
        assessor: RiskAssessor,
        event_bus: Optional[AsyncEventBus] = None,
        evaluator: Callable[[RiskScores], Verdict] = evaluate,
        audit: Optional[VerdictAuditLog] = None,
        traces: Optional[TraceCollector] = None,
    ):
        self.planner = planner
        self.assessor = assessor
        self.event_bus = event_bus or AsyncEventBus()
        self.evaluator = evaluator
        self.audit = audit
        self.traces = traces
        self.state_machine = WorkflowStateMachine()

        self._correlation_id = str(uuid.uuid4())
        self._task = ""
        self._plan: Optional[WorkerPlan] = None
        self._assessment: Optional[SentinelResult] = None
        self._verdict: Optional[Verdict] = None
        self._error: Optional[str] = None

    @classmethod
    def from_config(
        cls, config: SentinelConfig, event_bus: Optional[AsyncEventBus] = None
    ) -> "GovernanceOrchestrator":
        transport = build_transport(config.agents, config.llm)
        audit = (
            VerdictAuditLog(config.observability.audit_path)
            if config.audit.enabled
            else None
        )
        return cls(
            planner=PlanGenerator(transport, config.agents.worker_agent_id),
            assessor=RiskAssessor(transport, config.agents.sentinel_agent_id),
            event_bus=event_bus,
            audit=audit,
            traces=TraceCollector(config.observability.trace_dir),
        )

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def state(self) -> WorkflowState:
        return self.state_machine.state

    @property
    def error(self) -> Optional[str]:
        return self._error

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            state=self.state_machine.state,
            task=self._task,
            plan=self._plan,
            assessment=self._assessment,
            verdict=self._verdict,
            error=self._error,
            correlation_id=self._correlation_id,
        )

    async def analyze_task(self, task: str) -> Optional[WorkerPlan]:
        """Stage 1: ask the worker agent for a plan."""
        if not task or not task.strip():
            await self._report_error(EMPTY_TASK_MESSAGE, stage="input")
            return None

        if not self.state_machine.can_transition(WorkflowState.GENERATING_PLAN):
            raise IllegalStateTransition(self.state, WorkflowState.GENERATING_PLAN)

        self._correlation_id = str(uuid.uuid4())
        self._task = task.strip()
        self._plan = None
        self._assessment = None
        self._verdict = None
        self._error = None
        await self._set_state(WorkflowState.GENERATING_PLAN)

        self._trace_start("plan_generation", self._task)
        try:
            plan = await self.planner.generate(self._task)
        except SentinelError as e:
            return await self._stage_failed(
                "plan_generation", str(e), WorkflowState.AWAITING_INPUT
            )
        except Exception:
            logger.exception(
                "Worker call failed unexpectedly",
                extra=self._log_context("plan_generation"),
            )
            return await self._stage_failed(
                "plan_generation", NETWORK_ERROR_MESSAGE, WorkflowState.AWAITING_INPUT
            )

        self._plan = plan
        self._trace_complete(f"{len(plan.steps)} steps")
        await self._set_state(WorkflowState.PLAN_READY)
        await self.event_bus.emit(
            "workflow.plan_ready",
            {"plan": plan, "correlation_id": self._correlation_id},
        )
        return plan

    async def evaluate_plan(self) -> Optional[Verdict]:
        """Stage 2: score the cached plan, then apply the verdict policy."""
        if self._plan is None:
            logger.warning("evaluate_plan called without a plan — ignoring")
            return None

        await self._set_state(WorkflowState.ASSESSING_RISK)
        self._error = None

        self._trace_start("risk_assessment", f"{len(self._plan.steps)} steps")
        try:
            assessment = await self.assessor.assess(self._plan)
        except SentinelError as e:
            return await self._stage_failed(
                "risk_assessment", str(e), WorkflowState.PLAN_READY
            )
        except Exception:
            logger.exception(
                "Sentinel call failed unexpectedly",
                extra=self._log_context("risk_assessment"),
            )
            return await self._stage_failed(
                "risk_assessment", NETWORK_ERROR_MESSAGE, WorkflowState.PLAN_READY
            )
        self._trace_complete(str(assessment.risk_scores.to_dict()))

        self._trace_start("verdict", str(assessment.risk_scores.to_dict()))
        verdict = self.evaluator(assessment.risk_scores)
        self._trace_complete(verdict.type.value)

        self._assessment = assessment
        self._verdict = verdict
        logger.info(
            "Verdict %s (weighted=%.2f, confidence=%.1f): %s",
            verdict.type.value,
            verdict.weighted_score,
            verdict.confidence,
            "; ".join(verdict.triggered_rules),
            extra=self._log_context("verdict", verdict=verdict.type.value),
        )

        self._persist_verdict(assessment, verdict)

        await self._set_state(WorkflowState.VERDICT_READY)
        await self.event_bus.emit(
            "workflow.verdict_ready",
            {
                "verdict": verdict,
                "assessment": assessment,
                "correlation_id": self._correlation_id,
            },
        )
        return verdict

    async def run(self, task: str) -> WorkflowSnapshot:
        """Both stages back to back; stops at the first failure."""
        plan = await self.analyze_task(task)
        if plan is not None:
            await self.evaluate_plan()
        return self.snapshot()

    async def reset(self):
        """Discard everything and wait for a new task."""
        self._task = ""
        self._plan = None
        self._assessment = None
        self._verdict = None
        self._error = None
        previous = self.state_machine.reset()
        await self._emit_state_changed(previous)

    # ── Internals ─────────────────────────────────────────────────────────

    def _persist_verdict(self, assessment: SentinelResult, verdict: Verdict):
        """Audit and trace writes; a failed write is logged, the verdict stands."""
        if self.audit is not None:
            try:
                self.audit.record(
                    correlation_id=self._correlation_id,
                    scores=assessment.risk_scores,
                    verdict=verdict,
                    task=self._task,
                    plan=self._plan,
                )
            except OSError:
                logger.exception(
                    "Verdict audit write failed", extra=self._log_context("verdict")
                )
        self._save_traces(verdict.type.value)

    def _save_traces(self, outcome: str):
        if self.traces is None:
            return
        try:
            self.traces.save(self._correlation_id, outcome)
        except OSError:
            logger.exception("Trace write failed", extra=self._log_context())

    async def _set_state(self, target: WorkflowState):
        previous = self.state_machine.transition(target)
        await self._emit_state_changed(previous)

    async def _emit_state_changed(self, previous: WorkflowState):
        await self.event_bus.emit(
            "workflow.state_changed",
            {
                "previous": previous,
                "state": self.state_machine.state,
                "correlation_id": self._correlation_id,
            },
        )

    async def _stage_failed(
        self, stage: str, message: str, fallback: WorkflowState
    ) -> None:
        logger.error(
            "Stage %s failed: %s", stage, message, extra=self._log_context(stage)
        )
        self._trace_complete(message, status="failed")
        self._save_traces(f"{stage} failed")
        await self._set_state(fallback)
        await self._report_error(message, stage=stage)
        return None

    async def _report_error(self, message: str, stage: str):
        self._error = message
        await self.event_bus.emit(
            "workflow.error",
            {
                "message": message,
                "stage": stage,
                "correlation_id": self._correlation_id,
            },
        )

    def _trace_start(self, stage: str, summary: str):
        if self.traces is not None:
            self.traces.start_stage(self._correlation_id, stage, summary)

    def _trace_complete(self, summary: str, status: str = "success"):
        if self.traces is not None:
            self.traces.complete_stage(self._correlation_id, summary, status)

    def _log_context(self, stage: Optional[str] = None, **fields) -> dict:
        return {"correlation_id": self._correlation_id, "stage": stage, **fields}
