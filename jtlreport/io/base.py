"""Shared pieces of the record adapters: errors and field parsing."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Optional, Union

Source = Union[str, Path, IO]

#: Text timestamp layouts accepted in CSV sources, tried in order.
TIMESTAMP_FORMATS = (
    "%Y/%m/%d %H:%M:%S,%f",
    "%Y/%m/%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S,%f",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)


class MalformedSourceError(ValueError):
    """A source cannot be read as a JTL document."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class MalformedRecordError(MalformedSourceError):
    """A single record in a source has an unparsable field.

    Attributes:
        source: Name of the source.
        position: 1-based index of the record (CSV: data row; XML: sample).
        field: Name of the offending field.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        position: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        self.position = position
        self.field = field
        where = f"record {position}" if position is not None else "record"
        if field:
            where += f", field '{field}'"
        super().__init__(f"{where}: {message}", source)


def source_name(source: Source) -> str:
    """Human readable name of a path or stream."""
    if isinstance(source, (str, Path)):
        return str(source)
    return str(getattr(source, "name", "<stream>"))


def parse_bool(value: Optional[str]) -> bool:
    """JMeter booleans: only a case-insensitive ``"true"`` is true."""
    return value is not None and value.strip().lower() == "true"


def parse_int(value: Optional[str], field: str) -> int:
    """Parse a required non-negative integer field.

    Raises:
        ValueError: If the value is missing, not an integer, or negative.
    """
    if value is None or not value.strip():
        raise ValueError(f"missing value for '{field}'")
    try:
        number = int(value.strip())
    except ValueError:
        raise ValueError(f"'{field}' is not an integer: {value!r}") from None
    if number < 0:
        raise ValueError(f"'{field}' must not be negative: {number}")
    return number


def from_epoch_millis(millis: int) -> datetime:
    """UTC datetime for a JMeter epoch-millisecond timestamp."""
    return datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse epoch milliseconds or a formatted local time.

    Formatted values carry no zone; they are read as local time of the
    machine producing the report, matching how JMeter writes them.

    Raises:
        ValueError: If no supported layout matches.
    """
    if value is None or not value.strip():
        raise ValueError("missing timestamp")
    text = value.strip()
    if text.isdigit():
        return from_epoch_millis(int(text))
    for layout in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, layout).astimezone()
        except ValueError:
            continue
    raise ValueError(f"unsupported timestamp: {text!r}")
