"""Aggregation data model: records, histograms, monitors and error samples."""

from __future__ import annotations

from jtlreport.model.errors import BoundedList, ErrorCache, ErrorEntry
from jtlreport.model.histogram import KB_BUCKETS, MS_BUCKETS, BucketSpec, Histogram
from jtlreport.model.monitor import (
    UNIT_EXCEPTION,
    UNIT_JMETER_ERRORS,
    UNIT_KB,
    UNIT_MS,
    UNITS,
    LabelMonitor,
)
from jtlreport.model.record import AssertionFailure, Record, truncate
from jtlreport.model.registry import MonitorRegistry

__all__ = [
    "AssertionFailure",
    "BoundedList",
    "BucketSpec",
    "ErrorCache",
    "ErrorEntry",
    "Histogram",
    "KB_BUCKETS",
    "LabelMonitor",
    "MS_BUCKETS",
    "MonitorRegistry",
    "Record",
    "UNITS",
    "UNIT_EXCEPTION",
    "UNIT_JMETER_ERRORS",
    "UNIT_KB",
    "UNIT_MS",
    "truncate",
]
