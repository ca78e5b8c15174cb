"""Tests for record ingestion, classification and merging."""

from __future__ import annotations

import logging
import random

import pytest

from jtlreport.engine import AggregationEngine, error_label_for
from jtlreport.model.monitor import UNIT_EXCEPTION, UNIT_JMETER_ERRORS, UNIT_KB, UNIT_MS
from jtlreport.model.record import AssertionFailure, Record


def _rec(
    at, label="A", dur=10, success=True, code="200", msg="OK", offset=0, size=None, failures=()
):
    return Record.create(
        label=label,
        timestamp=at(offset),
        duration_ms=dur,
        success=success,
        result_code=code,
        response_message=msg,
        bytes_received=size,
        assertion_failures=failures,
    )


def test_error_label_for() -> None:
    assert error_label_for("A", "500") == "A - 500"
    assert error_label_for("A", "") == "A"


def test_success_and_failure_scenario(at) -> None:
    engine = AggregationEngine()
    engine.ingest(_rec(at, dur=10))
    engine.ingest(_rec(at, dur=5000, success=False, code="500", msg="err", offset=1))

    ms = engine.registry.get("A", UNIT_MS)
    assert ms.count == 2
    assert ms.minimum == 10
    assert ms.maximum == 5000

    errors = engine.registry.get("A - 500", UNIT_JMETER_ERRORS)
    assert errors.count == 1
    assert errors.total == 5000

    entries = engine.errors.for_label("A")
    assert len(entries) == 1
    assert entries[0].error_code == "500"
    assert entries[0].error_label == "A - 500"

    assert engine.record_count == 2
    assert engine.failure_count == 1


def test_failure_counts_once_in_exception_unit(at) -> None:
    engine = AggregationEngine()
    engine.ingest(_rec(at, dur=300, success=False, code="500", msg="err"))
    engine.ingest(_rec(at, dur=700, success=False, code="503", msg="busy", offset=5))
    exc = engine.registry.get("A", UNIT_EXCEPTION)
    assert exc.count == 2
    assert exc.total == 2
    assert engine.registry.get("A - 503", UNIT_JMETER_ERRORS).count == 1


def test_fifteen_failures_keep_first_three_messages(at, caplog) -> None:
    engine = AggregationEngine()
    with caplog.at_level(logging.DEBUG, logger="jtlreport"):
        for i in range(15):
            engine.ingest(_rec(at, success=False, code="500", msg=f"err {i}", offset=i))

    entries = engine.errors.for_label("A")
    assert [e.error_message for e in entries] == ["err 0", "err 1", "err 2"]
    assert engine.dropped_errors == 12
    assert "Error cache full" in caplog.text
    assert engine.registry.get("A", UNIT_EXCEPTION).count == 15


def test_failure_without_message_is_not_cached(at) -> None:
    engine = AggregationEngine()
    engine.ingest(_rec(at, success=False, code="500", msg=""))
    assert engine.errors.for_label("A") == ()
    assert engine.registry.get("A - 500", UNIT_JMETER_ERRORS).count == 1


def test_assertion_failure_classifies_the_error(at) -> None:
    engine = AggregationEngine()
    engine.ingest(
        _rec(
            at,
            success=False,
            code="200",
            msg="OK",
            failures=[AssertionFailure("Response Assertion", "missing text")],
        )
    )
    assert engine.registry.get("A - Response Assertion", UNIT_JMETER_ERRORS) is not None
    entry = engine.errors.for_label("A")[0]
    assert entry.error_code == "Response Assertion"
    assert entry.error_message == "missing text"


def test_bucket_boundary(at) -> None:
    engine = AggregationEngine()
    engine.ingest(_rec(at, dur=10))
    # Record durations are integral; exercise the boundary through the monitor.
    engine.registry.get("A", UNIT_MS).update(at(), 10.0001)
    hist = engine.registry.get("A", UNIT_MS).histogram.as_dict()
    assert hist["0-10ms"] == 1
    assert hist["10-20ms"] == 1


def test_payload_only_when_size_known(at) -> None:
    engine = AggregationEngine()
    engine.ingest(_rec(at, label="sized", size=2048))
    engine.ingest(_rec(at, label="unsized"))
    kb = engine.registry.get("sized", UNIT_KB)
    assert kb.total == pytest.approx(2.0)
    assert kb.histogram.as_dict()["1-2kb"] == 1
    assert engine.registry.get("unsized", UNIT_KB) is None


def test_empty_input_yields_empty_registry() -> None:
    engine = AggregationEngine()
    assert engine.ingest_all([]) == 0
    assert len(engine.registry) == 0
    assert engine.is_empty


def _sample_records(at, n=200, seed=7):
    rng = random.Random(seed)
    records = []
    for _ in range(n):
        ok = rng.random() > 0.2
        records.append(
            _rec(
                at,
                label=rng.choice(["Home", "Login", "Search"]),
                dur=rng.randint(0, 30000),
                success=ok,
                code="200" if ok else rng.choice(["500", "404"]),
                msg="OK" if ok else "boom",
                offset=rng.randint(0, 60_000),
                size=rng.randint(0, 3_000_000),
            )
        )
    return records


def _snapshot(engine: AggregationEngine):
    return {
        m.key: (
            m.count,
            m.minimum,
            m.maximum,
            m.first_seen,
            m.last_seen,
            tuple(m.histogram.counts),
        )
        for m in engine.registry.all()
    }


def test_order_does_not_change_statistics(at) -> None:
    records = _sample_records(at)
    shuffled = list(records)
    random.Random(1).shuffle(shuffled)

    a = AggregationEngine()
    b = AggregationEngine()
    a.ingest_all(records)
    b.ingest_all(shuffled)

    assert _snapshot(a) == _snapshot(b)
    for m in a.registry.all():
        assert m.total == pytest.approx(b.registry.get(m.label, m.unit).total)


def test_merge_equals_combined_aggregation(at) -> None:
    records = _sample_records(at)
    combined = AggregationEngine()
    combined.ingest_all(records)

    left = AggregationEngine()
    right = AggregationEngine()
    left.ingest_all(records[:80])
    right.ingest_all(records[80:])
    left.merge(right)

    assert _snapshot(left) == _snapshot(combined)
    for m in combined.registry.all():
        assert left.registry.get(m.label, m.unit).total == pytest.approx(m.total)
    assert left.record_count == combined.record_count
    assert left.failure_count == combined.failure_count
    for label in combined.errors.labels():
        assert left.errors.for_label(label) == combined.errors.for_label(label)


def test_bucket_counts_sum_to_count(at) -> None:
    engine = AggregationEngine()
    engine.ingest_all(_sample_records(at))
    for monitor in engine.registry.all():
        assert monitor.histogram.total == monitor.count


def test_merge_counts_dropped_errors_like_combined_run(at) -> None:
    failures = [
        _rec(at, success=False, code="500", msg=f"err {i}", offset=i) for i in range(10)
    ]
    combined = AggregationEngine()
    combined.ingest_all(failures)

    left = AggregationEngine()
    right = AggregationEngine()
    left.ingest_all(failures[:5])
    right.ingest_all(failures[5:])
    assert (left.dropped_errors, right.dropped_errors) == (2, 2)

    left.merge(right)
    assert combined.dropped_errors == 7
    assert left.dropped_errors == combined.dropped_errors
    assert left.errors.for_label("A") == combined.errors.for_label("A")
