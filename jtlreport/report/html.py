"""HTML report rendering.

:class:`HtmlReportWriter` turns a finished :class:`~jtlreport.runner.RunResult`
into a single self-contained HTML page using the Jinja2 template
``templates/report.html.j2``. Sections:

- Summary: requests, failures, success rate, average/min/max time
- Pages Overview (ms): per-label statistics with failure counts
- Pages Detail (ms): per-label latency histogram
- Payload Overview (KB): per-label response sizes, when sizes were recorded
- Error Summary / Error Details / Error Messages
- Report Properties: run window, creation date and host metadata
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from jinja2 import Environment, PackageLoader, StrictUndefined

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.logging import get_logger
from jtlreport.model.monitor import UNIT_EXCEPTION, UNIT_JMETER_ERRORS, UNIT_KB, UNIT_MS
from jtlreport.report.environment import collect_environment
from jtlreport.report.tables import (
    failures_by_label,
    monitor_frame,
    sort_frame,
    summarize,
)
from jtlreport.runner import RunResult
from jtlreport.utils.output_paths import ensure_parent_dir

logger = get_logger(__name__)

TEMPLATE_NAME = "report.html.j2"


def format_number(value: Any, decimals: int = 0) -> str:
    """Thousands-separated number; empty for missing values."""
    if value is None:
        return ""
    try:
        return f"{float(value):,.{decimals}f}"
    except (TypeError, ValueError):
        return str(value)


def _as_datetime(value: Any) -> Optional[datetime]:
    """Plain datetime for DataFrame cells, which hold ``pd.Timestamp`` or ``NaT``."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def format_time(value: Any) -> str:
    """Local wall-clock time ``HH:MM:SS``; empty for missing values."""
    value = _as_datetime(value)
    if value is None:
        return ""
    return value.astimezone().strftime("%H:%M:%S")


def format_datetime(value: Any) -> str:
    value = _as_datetime(value)
    if value is None:
        return ""
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("jtlreport.report", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["number"] = format_number
    env.filters["time"] = format_time
    env.filters["datetime"] = format_datetime
    return env


class HtmlReportWriter:
    """Render a run into an HTML document.

    Args:
        run: Completed aggregation run.
        config: Title, subtitle and table ordering.
        properties: Extra report properties; defaults to host metadata from
            :func:`collect_environment`.
        created: Report creation time (defaults to now).
    """

    def __init__(
        self,
        run: RunResult,
        config: ReportConfig = DEFAULT_CONFIG,
        properties: Optional[Dict[str, str]] = None,
        created: Optional[datetime] = None,
    ) -> None:
        self.run = run
        self.config = config
        self._properties = properties
        self.created = created

    def context(self) -> Dict[str, Any]:
        """Template variables for the current run.

        Raises:
            ValueError: If the run aggregated no request.
        """
        registry = self.run.engine.registry
        summary = summarize(registry)
        if not summary["requests"]:
            raise ValueError("No samples found in the given sources")

        failures = failures_by_label(registry)
        cfg = self.config

        pages = sort_frame(monitor_frame(registry, UNIT_MS), cfg.sort_by, cfg.sort_order)
        ms_buckets = list(registry.bucket_spec(UNIT_MS).all_labels)
        pages_rows = self._rows(pages, ms_buckets)
        for row in pages_rows:
            row["failures"] = failures.get(row["label"], 0)

        payload_rows: List[Dict[str, Any]] = []
        kb_buckets = list(registry.bucket_spec(UNIT_KB).all_labels)
        payload = monitor_frame(registry, UNIT_KB)
        if not payload.empty:
            payload_rows = self._rows(sort_frame(payload, cfg.sort_by, cfg.sort_order), kb_buckets)

        error_summary = sort_frame(
            monitor_frame(registry, UNIT_EXCEPTION, with_histogram=False), "label"
        )
        error_details = sort_frame(
            monitor_frame(registry, UNIT_JMETER_ERRORS, with_histogram=False), "label"
        )

        created = self.created or datetime.now().astimezone()
        properties = (
            self._properties
            if self._properties is not None
            else collect_environment(s.path for s in self.run.processed_sources)
        )
        report_properties = [
            ("First Request", format_datetime(summary["first_request"])),
            ("Last Request", format_datetime(summary["last_request"])),
            ("Report Duration (sec)", format_number(summary["duration_seconds"])),
            ("Report Creation Date", format_datetime(created)),
        ] + list(properties.items())

        return {
            "title": cfg.report_title,
            "subtitle": cfg.report_subtitle,
            "summary": summary,
            "ms_buckets": ms_buckets,
            "pages": pages_rows,
            "kb_buckets": kb_buckets,
            "payload": payload_rows,
            "error_summary": error_summary.to_dict(orient="records"),
            "error_details": error_details.to_dict(orient="records"),
            "error_messages": [
                entry for _, entries in self.run.engine.errors.items() for entry in entries
            ],
            "properties": report_properties,
        }

    @staticmethod
    def _rows(frame, bucket_labels: List[str]) -> List[Dict[str, Any]]:
        rows = []
        for record in frame.to_dict(orient="records"):
            record["buckets"] = [record[name] for name in bucket_labels]
            rows.append(record)
        return rows

    def render(self) -> str:
        """Return the report as an HTML string."""
        template = _environment().get_template(TEMPLATE_NAME)
        return template.render(**self.context())

    def write(self, path: Union[str, Path]) -> Path:
        """Render and write the report, creating parent directories."""
        target = Path(path)
        html = self.render()
        ensure_parent_dir(target)
        target.write_text(html, encoding="utf-8")
        logger.info(f"HTML report saved to: {target}")
        return target
