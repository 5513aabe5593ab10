"""
sentinel.ui.report — Plain-text rendering of plans, risk assessments and verdicts.
"""

from __future__ import annotations

from typing import Optional

from sentinel.policy.guidance import (
    dimension_label,
    required_action,
    risk_level,
    verdict_label,
)
from sentinel.utils.enums import RiskDimension
from sentinel.utils.types import SentinelResult, Verdict, WorkerPlan, WorkflowSnapshot

RULE_WIDTH = 72


def _heading(title: str) -> str:
    return f"── {title} ".ljust(RULE_WIDTH, "─")


def render_plan(plan: WorkerPlan) -> str:
    lines = [_heading("EXECUTION PLAN")]
    if not plan.steps:
        lines.append("  (no steps)")
    for step in plan.steps:
        tag = f"[{step.action_tag}] " if step.action_tag else ""
        lines.append(f"  {step.step_number:>2}. {tag}{step.action}")
        for concern in step.concerns:
            lines.append(f"        ⚠ {concern}")
    if plan.resources_needed:
        lines.append(f"  Resources needed: {', '.join(plan.resources_needed)}")
    if plan.external_systems:
        lines.append(f"  External systems: {', '.join(plan.external_systems)}")
    return "\n".join(lines)


def render_assessment(assessment: SentinelResult, explanations: bool = True) -> str:
    lines = [_heading("RISK ASSESSMENT")]
    for dim in RiskDimension:
        score = assessment.risk_scores.get(dim)
        lines.append(
            f"  {dimension_label(dim):<18} {score}/3  {risk_level(score):<9}"
        )
        why = assessment.risk_explanations.get(dim)
        if explanations and why:
            lines.append(f"      {why}")
    return "\n".join(lines)


def render_verdict(verdict: Verdict) -> str:
    lines = [
        _heading("VERDICT"),
        f"  {verdict.type.value}  ({verdict_label(verdict.type)})",
        f"  Weighted score: {verdict.weighted_score:.2f}   "
        f"Confidence: {verdict.confidence:.1f}%",
        "  Triggered rules:",
    ]
    lines.extend(f"    • {rule}" for rule in verdict.triggered_rules)
    lines.append(f"  Required action: {required_action(verdict.type)}")
    return "\n".join(lines)


def render_report(
    snapshot: WorkflowSnapshot, explanations: bool = True
) -> str:
    """Everything the workflow has produced so far, plus any error."""
    sections: list[str] = []
    if snapshot.task:
        sections.append(f"Task: {snapshot.task}")
    if snapshot.plan is not None:
        sections.append(render_plan(snapshot.plan))
    if snapshot.assessment is not None:
        sections.append(render_assessment(snapshot.assessment, explanations))
    if snapshot.verdict is not None:
        sections.append(render_verdict(snapshot.verdict))
    error = _render_error(snapshot.error)
    if error:
        sections.append(error)
    return "\n\n".join(sections)


def _render_error(message: Optional[str]) -> str:
    return f"ERROR: {message}" if message else ""
