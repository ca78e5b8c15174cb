"""Record adapters for XML and CSV JTL files."""

from __future__ import annotations

from jtlreport.io.base import MalformedRecordError, MalformedSourceError
from jtlreport.io.csv_source import iter_csv_records
from jtlreport.io.discovery import discover_sources, open_records
from jtlreport.io.xml_source import iter_xml_records

__all__ = [
    "MalformedRecordError",
    "MalformedSourceError",
    "discover_sources",
    "iter_csv_records",
    "iter_xml_records",
    "open_records",
]
