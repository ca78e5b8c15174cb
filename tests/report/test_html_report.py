"""Tests for HTML rendering."""

from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from jtlreport.config import ReportConfig
from jtlreport.engine import AggregationEngine
from jtlreport.model.record import Record
from jtlreport.report.html import (
    HtmlReportWriter,
    format_datetime,
    format_number,
    format_time,
)
from jtlreport.runner import RunResult, aggregate_sources

CREATED = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _writer(run, **config) -> HtmlReportWriter:
    return HtmlReportWriter(
        run, ReportConfig(**config), properties={"host.name": "test-host"}, created=CREATED
    )


def test_format_number() -> None:
    assert format_number(1234567) == "1,234,567"
    assert format_number(2.345, 1) == "2.3"
    assert format_number(None) == ""
    assert format_number("n/a") == "n/a"


def test_format_time_handles_none() -> None:
    assert format_time(None) == ""
    assert len(format_time(CREATED)) == 8


def test_formatters_accept_dataframe_timestamps() -> None:
    """Frame rows carry pandas timestamps; they format like datetimes."""
    stamp = pd.Timestamp(CREATED)
    assert format_time(stamp) == format_time(CREATED)
    assert format_datetime(stamp) == format_datetime(CREATED)
    assert format_time(pd.NaT) == ""


def test_render_single_sample(at) -> None:
    engine = AggregationEngine()
    engine.ingest(Record.create(label="A", timestamp=at(), duration_ms=5, success=True))
    html = _writer(RunResult(engine=engine)).render()
    assert format_time(at()) in html


def test_render_sections(sample_jtl) -> None:
    html = _writer(aggregate_sources([sample_jtl])).render()
    for heading in [
        "Summary",
        "Pages Overview (ms)",
        "Pages Detail Table (ms)",
        "Payload Overview (KB)",
        "Error Summary",
        "Error Details",
        "Error Messages",
        "Report Properties",
    ]:
        assert f"<h2>{heading}</h2>" in html
    assert "<title>Load Test Report</title>" in html
    assert "Checkout - Total Assertion" in html
    assert "Too slow" in html
    assert "test-host" in html
    assert "≥20480ms" in html
    assert 'class="Failure"' in html
    # subtitle is markup
    assert '<a href="https://jmeter.apache.org">JMeter</a>' in html


def test_context_values(sample_jtl) -> None:
    ctx = _writer(aggregate_sources([sample_jtl])).context()
    assert ctx["summary"]["requests"] == 4
    pages = {row["label"]: row for row in ctx["pages"]}
    assert pages["Login"]["failures"] == 1
    assert pages["Home"]["failures"] == 0
    assert len(pages["Home"]["buckets"]) == 13
    # Checkout has no recorded size
    assert [row["label"] for row in ctx["payload"]] == ["Home", "Login", "Cart"]
    assert [row["label"] for row in ctx["error_summary"]] == ["Checkout", "Login"]
    assert dict(ctx["properties"])["Report Duration (sec)"] == "2"


def test_payload_section_omitted_without_sizes(at) -> None:
    engine = AggregationEngine()
    engine.ingest(Record.create(label="x", timestamp=at(), duration_ms=5, success=True))
    html = _writer(RunResult(engine=engine)).render()
    assert "Payload Overview" not in html
    assert "Error Summary" not in html


def test_labels_are_escaped(at) -> None:
    engine = AggregationEngine()
    engine.ingest(
        Record.create(label="<script>x</script>", timestamp=at(), duration_ms=5, success=True)
    )
    html = _writer(RunResult(engine=engine)).render()
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html


def test_custom_title_and_sort(sample_jtl) -> None:
    writer = _writer(aggregate_sources([sample_jtl]), report_title="Nightly", sort_by="label")
    assert "<h1>Nightly</h1>" in writer.render()
    assert [r["label"] for r in writer.context()["pages"]] == [
        "Cart",
        "Checkout",
        "Home",
        "Login",
    ]


def test_empty_run_raises() -> None:
    with pytest.raises(ValueError, match="No samples found"):
        _writer(RunResult(engine=AggregationEngine())).render()


def test_write_creates_parent(tmp_path, sample_jtl) -> None:
    target = tmp_path / "out" / "report.html"
    assert _writer(aggregate_sources([sample_jtl])).write(target) == target
    assert target.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
