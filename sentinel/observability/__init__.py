"""
sentinel.observability — Structured logging, pipeline traces and the verdict audit log.
"""

from sentinel.observability.logger import setup_logging, TraceCollector, VerdictAuditLog

__all__ = ["setup_logging", "TraceCollector", "VerdictAuditLog"]
