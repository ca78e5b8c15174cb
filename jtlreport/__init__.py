"""jtlreport: aggregation and reporting for JMeter result files.

jtlreport reads JMeter JTL results (XML or CSV), folds every sample into
per-label monitors (latency, payload size, failures) with fixed histograms,
keeps a few error messages per label and renders the result as an HTML
report or a JSON document.

Primary API:
    aggregate_sources() - Read files/directories into a RunResult
    AggregationEngine - Incremental aggregation of Record objects
    HtmlReportWriter - Render a RunResult as HTML
    results_to_dict() - JSON-safe export of a RunResult

Example:
    from jtlreport import aggregate_sources, HtmlReportWriter

    run = aggregate_sources(["results/"])
    HtmlReportWriter(run).write("report.html")
"""

from __future__ import annotations

from jtlreport import cli, logging
from jtlreport._version import __version__
from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.engine import AggregationEngine
from jtlreport.io import MalformedRecordError, MalformedSourceError, discover_sources
from jtlreport.model import (
    AssertionFailure,
    ErrorCache,
    ErrorEntry,
    Histogram,
    LabelMonitor,
    MonitorRegistry,
    Record,
)
from jtlreport.report import HtmlReportWriter
from jtlreport.results import results_to_dict, write_results
from jtlreport.runner import RunResult, SourceOutcome, aggregate_source, aggregate_sources

__all__ = [
    # Version
    "__version__",
    # Model
    "Record",
    "AssertionFailure",
    "Histogram",
    "LabelMonitor",
    "MonitorRegistry",
    "ErrorCache",
    "ErrorEntry",
    # Aggregation
    "AggregationEngine",
    "aggregate_source",
    "aggregate_sources",
    "RunResult",
    "SourceOutcome",
    "discover_sources",
    "MalformedSourceError",
    "MalformedRecordError",
    # Configuration
    "ReportConfig",
    "DEFAULT_CONFIG",
    # Output
    "HtmlReportWriter",
    "results_to_dict",
    "write_results",
    # Utilities
    "cli",
    "logging",
]
