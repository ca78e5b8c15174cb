"""Record ingestion and failure classification.

:class:`AggregationEngine` folds a stream of :class:`~jtlreport.model.Record`
values into a :class:`~jtlreport.model.MonitorRegistry` and an
:class:`~jtlreport.model.ErrorCache`. Each record touches:

- the ``ms.`` monitor of its label (always),
- the ``kb.`` monitor of its label (when the source reported a size),
- on failure, the ``JMeter Errors`` monitor of ``"label - code"``, the
  ``Exception`` monitor of the label (weight 1) and the error cache.

The engine holds no state across records beyond these collaborators, so the
result does not depend on record order (apart from which error samples are
kept: the first ones win).
"""

from __future__ import annotations

from typing import Iterable, Optional

from jtlreport.logging import get_logger
from jtlreport.model.errors import DEFAULT_CAPACITY, ErrorCache, ErrorEntry
from jtlreport.model.monitor import (
    UNIT_EXCEPTION,
    UNIT_JMETER_ERRORS,
    UNIT_KB,
    UNIT_MS,
)
from jtlreport.model.record import Record
from jtlreport.model.registry import MonitorRegistry

logger = get_logger(__name__)

ERROR_LABEL_SEPARATOR = " - "


def error_label_for(label: str, result_code: str) -> str:
    """Return the key used for the ``JMeter Errors`` monitor of a failure.

    Examples:
        >>> error_label_for("Login", "500")
        'Login - 500'
        >>> error_label_for("Login", "")
        'Login'
    """
    if not result_code:
        return label
    return f"{label}{ERROR_LABEL_SEPARATOR}{result_code}"


class AggregationEngine:
    """Single-pass aggregator owning one registry and one error cache.

    Args:
        error_capacity: Error samples kept per label.
        registry: Registry to fill; a fresh one is created when omitted.
    """

    def __init__(
        self,
        error_capacity: int = DEFAULT_CAPACITY,
        registry: Optional[MonitorRegistry] = None,
    ) -> None:
        self.registry = registry if registry is not None else MonitorRegistry()
        self.errors = ErrorCache(capacity=error_capacity)
        self.record_count = 0
        self.failure_count = 0
        self.dropped_errors = 0

    def ingest(self, record: Record) -> None:
        """Fold one record into the registry and error cache."""
        label = record.label
        timestamp = record.timestamp

        self.registry.get_or_create(label, UNIT_MS).update(timestamp, record.duration_ms)
        if record.bytes_received is not None:
            self.registry.get_or_create(label, UNIT_KB).update(
                timestamp, record.bytes_received / 1024.0
            )
        self.record_count += 1

        if record.success:
            return

        self.failure_count += 1
        result_code, message = record.classification()
        error_label = error_label_for(label, result_code)

        self.registry.get_or_create(error_label, UNIT_JMETER_ERRORS).update(
            timestamp, record.duration_ms
        )
        self.registry.get_or_create(label, UNIT_EXCEPTION).update(timestamp, 1)

        if message:
            entry = ErrorEntry(
                label=label,
                error_label=error_label,
                error_code=result_code,
                error_message=message,
                timestamp=timestamp,
            )
            if not self.errors.record(label, entry):
                self.dropped_errors += 1
                logger.debug(f"Error cache full for '{label}', dropping: {message}")

    def ingest_all(self, records: Iterable[Record]) -> int:
        """Consume ``records`` in one forward pass.

        Returns:
            Number of records folded in by this call.
        """
        before = self.record_count
        for record in records:
            self.ingest(record)
        return self.record_count - before

    def merge(self, other: "AggregationEngine") -> None:
        """Fold another engine's state into this one.

        Monitor statistics merge associatively and commutatively; error
        samples from ``other`` are appended after this engine's own.
        """
        self.registry.merge(other.registry)
        dropped = self.errors.merge(other.errors)
        self.record_count += other.record_count
        self.failure_count += other.failure_count
        self.dropped_errors += other.dropped_errors + dropped

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0

    def __repr__(self) -> str:
        return (
            f"AggregationEngine(records={self.record_count}, "
            f"failures={self.failure_count}, monitors={len(self.registry)})"
        )
