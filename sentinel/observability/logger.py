"""
sentinel.observability.logger — Structured JSON logging, run traces and the verdict audit log.

Every governance run has a correlation_id. Log records may carry workflow
context through ``extra=``; the JSON formatter lifts those fields to the top
level so one run can be followed across the worker call, the sentinel call
and the verdict.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sentinel.utils.config import ObservabilityConfig
from sentinel.utils.types import RiskScores, Verdict, WorkerPlan

# Workflow context a record may carry via ``extra=``
CONTEXT_FIELDS = ("correlation_id", "stage", "agent_id", "verdict")

# HTTP client loggers that are noisy at DEBUG
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.client", "httpx", "httpcore")

PIPELINE_STAGES = ("plan_generation", "risk_assessment", "verdict")


def _utc_iso(ts: Optional[float] = None) -> str:
    moment = datetime.fromtimestamp(ts if ts is not None else time.time(), timezone.utc)
    return moment.replace(tzinfo=None).isoformat() + "Z"


def _sha256(data: object) -> str:
    return hashlib.sha256(
        json.dumps(data, sort_keys=True, default=str).encode()
    ).hexdigest()


class JSONFormatter(logging.Formatter):
    """One JSON line per record, with any workflow context fields it carries."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(config: ObservabilityConfig, debug: bool = False):
    """JSON lines to the log file; warnings (everything with debug) to stderr.

    stdout is left alone so reports and --json output stay clean.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(str(log_dir / config.log_file), encoding="utf-8")
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(levelname)-7s │ %(name)-32s │ %(message)s")
    )
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class TraceCollector:
    """Per-run timing of the three pipeline stages, saved as one JSON document."""

    def __init__(self, trace_dir: str = "logs/traces"):
        self.trace_dir = Path(trace_dir)
        self.trace_dir.mkdir(parents=True, exist_ok=True)
        self._traces: dict[str, list[dict]] = {}

    def start_stage(
        self, correlation_id: str, stage_name: str, input_summary: str = ""
    ):
        if stage_name not in PIPELINE_STAGES:
            raise ValueError(f"Unknown pipeline stage: {stage_name!r}")
        self._traces.setdefault(correlation_id, []).append(
            {
                "stage": stage_name,
                "started_at": time.time(),
                "input": input_summary[:500],
                "status": "in_progress",
            }
        )

    def complete_stage(
        self, correlation_id: str, output_summary: str = "", status: str = "success"
    ):
        if self._traces.get(correlation_id):
            stage = self._traces[correlation_id][-1]
            stage["completed_at"] = time.time()
            stage["output"] = output_summary[:500]
            stage["status"] = status
            stage["duration_ms"] = (stage["completed_at"] - stage["started_at"]) * 1000

    def stages(self, correlation_id: str) -> list[dict]:
        return list(self._traces.get(correlation_id, []))

    def save(self, correlation_id: str, outcome: str = "") -> Optional[Path]:
        """Write the run's trace and forget it.

        outcome is the verdict type, or "<stage> failed" for an aborted run.
        """
        stages = self._traces.get(correlation_id)
        if not stages:
            return None
        document = {
            "correlation_id": correlation_id,
            "outcome": outcome,
            "total_ms": sum(s.get("duration_ms", 0.0) for s in stages),
            "stages": stages,
        }
        path = self.trace_dir / f"{correlation_id}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, default=str, ensure_ascii=False)
        del self._traces[correlation_id]
        return path


class VerdictAuditLog:
    """Append-only JSONL log of every verdict issued.

    Task text and plan are stored as SHA-256 digests, never verbatim.
    """

    def __init__(self, log_path: str = "logs/verdict_audit.jsonl"):
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def record(
        self,
        correlation_id: str,
        scores: RiskScores,
        verdict: Verdict,
        task: str = "",
        plan: Optional[WorkerPlan] = None,
    ) -> dict:
        entry = {
            "timestamp": _utc_iso(),
            "correlation_id": correlation_id,
            "task_hash": _sha256(task),
            "plan_hash": _sha256(plan.to_dict()) if plan is not None else None,
            "risk_scores": scores.to_dict(),
            "verdict": verdict.type.value,
            "weighted_score": verdict.weighted_score,
            "confidence": verdict.confidence,
            "triggered_rules": list(verdict.triggered_rules),
        }
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str, ensure_ascii=False) + "\n")
        return entry

    def read_all(self) -> list[dict]:
        if not self.log_path.exists():
            return []
        with open(self.log_path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
