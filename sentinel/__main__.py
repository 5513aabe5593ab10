"""
Sentinel — Plan governance gate
Entry point: python -m sentinel
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from sentinel.agents.capabilities import RiskDataError, coerce_score
from sentinel.core.orchestrator import GovernanceOrchestrator
from sentinel.observability.logger import setup_logging
from sentinel.policy.verdict_engine import evaluate
from sentinel.ui.report import render_report, render_verdict
from sentinel.utils.config import SentinelConfig
from sentinel.utils.enums import WorkflowState
from sentinel.utils.types import DIMENSION_KEYS, RiskScores, WorkflowSnapshot

logger = logging.getLogger("sentinel")

PROGRESS_MESSAGES = {
    WorkflowState.GENERATING_PLAN: "Worker agent is drafting a plan...",
    WorkflowState.PLAN_READY: "Plan ready.",
    WorkflowState.ASSESSING_RISK: "Sentinel agent is assessing risk...",
    WorkflowState.VERDICT_READY: "Verdict ready.",
}


def print_banner():
    print(
        r"""
  ┌─┐┌─┐┌┐┌┌┬┐┬┌┐┌┌─┐┬
  └─┐├┤ │││ │ ││││├┤ │
  └─┘└─┘┘└┘ ┴ ┴┘└┘└─┘┴─┘
  Plan Governance Gate v0.1.0
  """
    )


def parse_scores(text: str) -> RiskScores:
    """Six comma-separated integers in dimension order, each 0-3."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != len(DIMENSION_KEYS):
        raise argparse.ArgumentTypeError(
            f"expected {len(DIMENSION_KEYS)} scores ({','.join(DIMENSION_KEYS)})"
        )
    try:
        values = [int(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"scores must be integers: {text!r}") from None
    try:
        checked = {k: coerce_score(k, v) for k, v in zip(DIMENSION_KEYS, values)}
    except RiskDataError as e:
        raise argparse.ArgumentTypeError(str(e)) from None
    return RiskScores(**checked)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentinel",
        description="Generate a plan for a task, assess its risk and issue a verdict.",
    )
    parser.add_argument("task", nargs="?", help="natural-language task description")
    parser.add_argument(
        "--scores",
        type=parse_scores,
        help="evaluate risk scores directly: "
        "irreversibility,external_impact,financial,safety,missing_context,policy_violation",
    )
    parser.add_argument("--config", default="config.yaml", help="path to config.yaml")
    parser.add_argument("--json", action="store_true", help="machine-readable output")
    parser.add_argument(
        "--no-explanations", action="store_true", help="omit per-dimension explanations"
    )
    parser.add_argument("--debug", action="store_true", help="verbose console logging")
    return parser


def _snapshot_to_dict(snapshot: WorkflowSnapshot) -> dict:
    return {
        "correlation_id": snapshot.correlation_id,
        "state": snapshot.state.name,
        "task": snapshot.task,
        "plan": snapshot.plan.to_dict() if snapshot.plan else None,
        "assessment": snapshot.assessment.to_dict() if snapshot.assessment else None,
        "verdict": snapshot.verdict.to_dict() if snapshot.verdict else None,
        "error": snapshot.error,
    }


async def run_pipeline(
    config: SentinelConfig, task: str, show_progress: bool = True
) -> WorkflowSnapshot:
    orchestrator = GovernanceOrchestrator.from_config(config)

    async def _on_state(event):
        message = PROGRESS_MESSAGES.get(event["state"])
        if message:
            print(f"  → {message}", file=sys.stderr)

    if show_progress:
        orchestrator.event_bus.subscribe("workflow.state_changed", _on_state)
    return await orchestrator.run(task)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.scores is None and not args.task:
        parser.error("a task or --scores is required")

    config = SentinelConfig.load(args.config)
    config.debug = config.debug or args.debug
    setup_logging(config.observability, debug=config.debug)

    if args.scores is not None:
        verdict = evaluate(args.scores)
        if args.json:
            print(json.dumps(verdict.to_dict(), ensure_ascii=False))
        else:
            print(render_verdict(verdict))
        return 0

    if not args.json:
        print_banner()

    try:
        snapshot = asyncio.run(
            run_pipeline(config, args.task, show_progress=not args.json)
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt — aborting")
        return 1

    if args.json:
        print(json.dumps(_snapshot_to_dict(snapshot), ensure_ascii=False, default=str))
    else:
        print(render_report(snapshot, explanations=not args.no_explanations))
    return 0 if snapshot.verdict is not None else 1


if __name__ == "__main__":
    sys.exit(main())
