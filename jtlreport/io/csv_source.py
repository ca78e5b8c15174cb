"""Streaming reader for CSV JTL files.

The first row must be JMeter's header line, e.g.::

    timeStamp,elapsed,label,responseCode,responseMessage,threadName,dataType,success,bytes
    1329852757203,128,Initialize,200,OK,Setup 1-1,text,true,2469

Only the columns listed in :data:`REQUIRED_COLUMNS` and the optional
``bytes`` column are used; others are ignored.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import IO, Iterator, Mapping, Optional

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.io.base import (
    MalformedRecordError,
    MalformedSourceError,
    Source,
    parse_bool,
    parse_int,
    parse_timestamp,
    source_name,
)
from jtlreport.model.record import Record

TIME_STAMP = "timeStamp"
ELAPSED = "elapsed"
LABEL = "label"
RESPONSE_CODE = "responseCode"
RESPONSE_MESSAGE = "responseMessage"
SUCCESS = "success"
BYTES = "bytes"

REQUIRED_COLUMNS = (TIME_STAMP, ELAPSED, LABEL, RESPONSE_CODE, RESPONSE_MESSAGE, SUCCESS)


def iter_csv_records(
    source: Source, config: ReportConfig = DEFAULT_CONFIG
) -> Iterator[Record]:
    """Yield one record per data row of a CSV JTL source.

    Args:
        source: Path, text stream or binary stream.
        config: Supplies the delimiter and truncation limits.

    Raises:
        MalformedSourceError: The source is empty or lacks a required column.
        MalformedRecordError: A row has an unparsable timestamp, elapsed time
            or byte count.
    """
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8", newline="") as stream:
            yield from _iter_rows(stream, source_name(source), config)
    elif isinstance(source, io.TextIOBase):
        yield from _iter_rows(source, source_name(source), config)
    else:
        text = io.TextIOWrapper(source, encoding="utf-8", newline="")
        yield from _iter_rows(text, source_name(source), config)


def _iter_rows(stream: IO[str], name: str, config: ReportConfig) -> Iterator[Record]:
    reader = csv.DictReader(stream, delimiter=config.csv_delimiter)
    header = reader.fieldnames
    if not header:
        raise MalformedSourceError("empty CSV file, expected a header row", name)
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise MalformedSourceError(
            f"CSV header lacks required columns: {', '.join(missing)}", name
        )
    has_bytes = BYTES in header

    for position, row in enumerate(reader, start=1):
        yield _row_to_record(row, has_bytes, name, position, config)


def _row_to_record(
    row: Mapping[str, Optional[str]],
    has_bytes: bool,
    name: str,
    position: int,
    config: ReportConfig,
) -> Record:
    try:
        timestamp = parse_timestamp(row.get(TIME_STAMP))
    except (ValueError, OverflowError, OSError) as e:
        raise MalformedRecordError(str(e), name, position, TIME_STAMP) from e
    try:
        duration = parse_int(row.get(ELAPSED), ELAPSED)
    except ValueError as e:
        raise MalformedRecordError(str(e), name, position, ELAPSED) from e

    bytes_received = None
    if has_bytes:
        raw = row.get(BYTES)
        try:
            bytes_received = parse_int(raw, BYTES) if raw and raw.strip() else 0
        except ValueError as e:
            raise MalformedRecordError(str(e), name, position, BYTES) from e

    return Record.create(
        label=row.get(LABEL),
        timestamp=timestamp,
        duration_ms=duration,
        success=parse_bool(row.get(SUCCESS)),
        result_code=row.get(RESPONSE_CODE),
        response_message=row.get(RESPONSE_MESSAGE),
        bytes_received=bytes_received,
        label_length=config.label_length,
        result_code_length=config.result_code_length,
        message_length=config.message_length,
    )
