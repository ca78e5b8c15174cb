"""Report rendering: pandas tables, host metadata and the HTML writer."""

from __future__ import annotations

from jtlreport.report.environment import collect_environment
from jtlreport.report.html import HtmlReportWriter
from jtlreport.report.tables import failures_by_label, monitor_frame, sort_frame, summarize

__all__ = [
    "HtmlReportWriter",
    "collect_environment",
    "failures_by_label",
    "monitor_frame",
    "sort_frame",
    "summarize",
]
