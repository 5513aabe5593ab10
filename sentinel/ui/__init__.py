"""
sentinel.ui — Text presentation of workflow results.
"""

from sentinel.ui.report import (
    render_assessment,
    render_plan,
    render_report,
    render_verdict,
)

__all__ = ["render_assessment", "render_plan", "render_report", "render_verdict"]
