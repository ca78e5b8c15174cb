"""Configuration for ingestion and report rendering."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

from jtlreport.utils.yaml_utils import load_yaml_mapping

SORT_COLUMNS = ("label", "requests", "avg", "total", "min", "max", "first_seen", "last_seen")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class ReportConfig:
    """Settings shared by the record adapters, the runner and the report writer."""

    # Record field limits; longer values are cut and suffixed with ".."
    label_length: int = 70
    result_code_length: int = 70
    message_length: int = 255

    # Error detail samples kept per label
    error_cache_capacity: int = 3

    csv_delimiter: str = ","

    report_title: str = "Load Test Report"
    report_subtitle: str = (
        'Designed for use with <a href="https://jmeter.apache.org">JMeter</a>.'
    )

    # Ordering of the per-label tables in the report
    sort_by: str = "first_seen"
    sort_order: str = "asc"

    # Keep going with the next source when one fails to parse
    continue_on_error: bool = False

    # Accept an XML file that stops mid-document (a test still writing it)
    # and keep its complete samples; otherwise such a file fails its source
    tolerate_truncated_xml: bool = False

    def __post_init__(self) -> None:
        for name in ("label_length", "result_code_length", "message_length"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 3:
                raise ValueError(f"{name} must be an integer >= 3, got {value!r}")
        if not isinstance(self.error_cache_capacity, int) or self.error_cache_capacity < 0:
            raise ValueError(
                f"error_cache_capacity must be a non-negative integer, "
                f"got {self.error_cache_capacity!r}"
            )
        if not isinstance(self.csv_delimiter, str) or len(self.csv_delimiter) != 1:
            raise ValueError(
                f"csv_delimiter must be a single character, got {self.csv_delimiter!r}"
            )
        if self.sort_by not in SORT_COLUMNS:
            raise ValueError(
                f"sort_by must be one of {', '.join(SORT_COLUMNS)}, got {self.sort_by!r}"
            )
        if self.sort_order not in SORT_ORDERS:
            raise ValueError(f"sort_order must be 'asc' or 'desc', got {self.sort_order!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportConfig":
        """Build a config from a mapping, rejecting unknown keys.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ReportConfig":
        """Load a config from a YAML file holding a flat mapping.

        An empty file yields the defaults.
        """
        return cls.from_dict(load_yaml_mapping(path))

    def merged(self, **overrides: Any) -> "ReportConfig":
        """Return a copy with the given overrides applied; ``None`` values are ignored."""
        applied = {k: v for k, v in overrides.items() if v is not None}
        if not applied:
            return self
        return replace(self, **applied)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = ReportConfig()
