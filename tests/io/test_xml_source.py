"""Tests for the streaming XML JTL reader."""

from __future__ import annotations

import io
import logging

import pytest

from jtlreport.config import ReportConfig
from jtlreport.io.base import MalformedRecordError, MalformedSourceError
from jtlreport.io.xml_source import iter_xml_records


def test_reads_flat_and_nested_samples(sample_jtl, at) -> None:
    records = list(iter_xml_records(sample_jtl))
    # inner samples come before the sample enclosing them
    assert [r.label for r in records] == ["Home", "Login", "Cart", "Checkout"]

    home, login, cart, checkout = records
    assert home.duration_ms == 120
    assert home.timestamp == at(0)
    assert home.success is True
    assert home.bytes_received == 2048

    assert login.success is False
    assert login.classification() == ("500", "Internal Server Error")

    # passing assertions are not recorded
    assert cart.assertion_failures == ()

    assert checkout.bytes_received is None
    assert checkout.classification() == ("Total Assertion", "Too slow")


def test_reads_binary_stream() -> None:
    doc = b'<testResults><sample t="5" ts="1700000000000" s="true" lb="x"/></testResults>'
    records = list(iter_xml_records(io.BytesIO(doc)))
    assert len(records) == 1
    assert records[0].label == "x"
    assert records[0].result_code == ""


def test_error_flag_counts_as_assertion_failure() -> None:
    doc = b"""<testResults>
    <httpSample t="5" ts="1700000000000" s="false" lb="x" rc="200">
      <assertionResult><name>JSR223</name><failure>false</failure><error>true</error></assertionResult>
    </httpSample></testResults>"""
    (record,) = iter_xml_records(io.BytesIO(doc))
    assert record.classification() == ("JSR223", "")


def test_truncation_limits_come_from_config() -> None:
    doc = b'<testResults><sample t="5" ts="1700000000000" s="true" lb="abcdefghij"/></testResults>'
    config = ReportConfig(label_length=6)
    (record,) = iter_xml_records(io.BytesIO(doc), config)
    assert record.label == "abcd.."


PARTIAL = (
    '<testResults>\n<sample t="5" ts="1700000000000" s="true" lb="a"/>\n'
    '<sample t="6" ts="1700000000001" s="true" lb="b"/>\n<sample t="7" ts="17000'
)
TOLERANT = ReportConfig(tolerate_truncated_xml=True)


def test_truncated_file_fails_by_default(write_file) -> None:
    path = write_file("partial.jtl", PARTIAL)
    with pytest.raises(MalformedSourceError, match="ends early"):
        list(iter_xml_records(path))


def test_unclosed_root_fails_by_default(write_file) -> None:
    path = write_file(
        "running.jtl", '<testResults>\n<sample t="5" ts="1700000000000" s="true" lb="a"/>\n'
    )
    with pytest.raises(MalformedSourceError, match="ends early"):
        list(iter_xml_records(path))


def test_empty_file_fails_by_default(write_file) -> None:
    with pytest.raises(MalformedSourceError):
        list(iter_xml_records(write_file("empty.jtl", "")))


def test_tolerant_config_keeps_complete_samples(write_file, caplog) -> None:
    path = write_file("partial.jtl", PARTIAL)
    with caplog.at_level(logging.WARNING, logger="jtlreport"):
        records = list(iter_xml_records(path, TOLERANT))
    assert [r.label for r in records] == ["a", "b"]
    assert "ends early" in caplog.text


def test_tolerant_config_accepts_unclosed_root_and_empty_file(write_file) -> None:
    path = write_file(
        "running.jtl", '<testResults>\n<sample t="5" ts="1700000000000" s="true" lb="a"/>\n'
    )
    assert [r.label for r in iter_xml_records(path, TOLERANT)] == ["a"]
    assert list(iter_xml_records(write_file("empty.jtl", ""), TOLERANT)) == []


def test_tolerant_config_still_rejects_invalid_xml(write_file) -> None:
    path = write_file(
        "bad.jtl", '<testResults><sample t="1" ts="1700000000000" lb="a"></oops></testResults>'
    )
    with pytest.raises(MalformedSourceError, match="invalid XML"):
        list(iter_xml_records(path, TOLERANT))


def test_malformed_xml_raises(write_file) -> None:
    path = write_file(
        "bad.jtl", '<testResults><sample t="1" ts="1700000000000" lb="a"></oops></testResults>'
    )
    with pytest.raises(MalformedSourceError, match="invalid XML"):
        list(iter_xml_records(path))


def test_non_numeric_elapsed_raises_with_position(write_file) -> None:
    path = write_file(
        "bad_t.jtl",
        '<testResults><sample t="5" ts="1700000000000" s="true" lb="a"/>'
        '<sample t="slow" ts="1700000000000" s="true" lb="b"/></testResults>',
    )
    with pytest.raises(MalformedRecordError) as exc_info:
        list(iter_xml_records(path))
    assert exc_info.value.position == 2
    assert "bad_t.jtl" in str(exc_info.value)


def test_missing_timestamp_raises(write_file) -> None:
    path = write_file("no_ts.jtl", '<testResults><sample t="5" s="true" lb="a"/></testResults>')
    with pytest.raises(MalformedRecordError, match="ts"):
        list(iter_xml_records(path))


def test_unknown_elements_are_ignored(write_file) -> None:
    path = write_file(
        "extra.jtl",
        '<testResults><sample t="5" ts="1700000000000" s="true" lb="a">'
        "<responseHeader>x</responseHeader><java.net.URL>http://x</java.net.URL>"
        "</sample></testResults>",
    )
    (record,) = iter_xml_records(path)
    assert record.label == "a"
