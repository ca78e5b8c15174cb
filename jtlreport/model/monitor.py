"""Running statistics for one (label, unit) pair."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from jtlreport.model.histogram import MS_BUCKETS, BucketSpec, Histogram

#: Request durations in milliseconds.
UNIT_MS = "ms."
#: Response sizes in kilobytes.
UNIT_KB = "kb."
#: Failure counts per request label (weight 1 per failure).
UNIT_EXCEPTION = "Exception"
#: Durations of failed requests keyed by "label - result code".
UNIT_JMETER_ERRORS = "JMeter Errors"

UNITS = (UNIT_MS, UNIT_KB, UNIT_EXCEPTION, UNIT_JMETER_ERRORS)


@dataclass
class LabelMonitor:
    """Single-pass statistics over the values observed for a label and unit.

    ``first_seen`` and ``last_seen`` are the earliest and latest timestamps
    folded in, whatever order the records arrived in. Variance is derived
    from the running sum and sum of squares.

    Attributes:
        label: Request label (or error label for ``UNIT_JMETER_ERRORS``).
        unit: One of the ``UNIT_*`` constants.
        count: Number of values observed.
        total: Sum of values.
        sum_of_squares: Sum of squared values.
        minimum: Smallest value, None before the first update.
        maximum: Largest value, None before the first update.
        first_seen: Earliest timestamp, None before the first update.
        last_seen: Latest timestamp, None before the first update.
        histogram: Bucket counts over the values.
    """

    label: str
    unit: str
    histogram: Histogram = field(default_factory=Histogram)
    count: int = 0
    total: float = 0.0
    sum_of_squares: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    @classmethod
    def empty(cls, label: str, unit: str, spec: BucketSpec = MS_BUCKETS) -> "LabelMonitor":
        return cls(label=label, unit=unit, histogram=Histogram(spec=spec))

    @property
    def key(self) -> tuple[str, str]:
        return (self.label, self.unit)

    def update(self, timestamp: datetime, value: float) -> None:
        """Fold one observation into the statistics."""
        self.count += 1
        self.total += value
        self.sum_of_squares += value * value
        if self.minimum is None or value < self.minimum:
            self.minimum = value
        if self.maximum is None or value > self.maximum:
            self.maximum = value
        if self.first_seen is None or timestamp < self.first_seen:
            self.first_seen = timestamp
        if self.last_seen is None or timestamp > self.last_seen:
            self.last_seen = timestamp
        self.histogram.observe(value)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    @property
    def stdev(self) -> float:
        """Population standard deviation; rounding noise below zero reads as 0."""
        if not self.count:
            return 0.0
        mean = self.total / self.count
        variance = self.sum_of_squares / self.count - mean * mean
        return math.sqrt(variance) if variance > 0.0 else 0.0

    def merge(self, other: "LabelMonitor") -> None:
        """Fold another monitor for the same key into this one.

        Raises:
            ValueError: If the monitors track different keys.
        """
        if other.key != self.key:
            raise ValueError(f"Cannot merge monitor {other.key} into {self.key}")
        if not other.count:
            return
        self.histogram.merge(other.histogram)
        self.count += other.count
        self.total += other.total
        self.sum_of_squares += other.sum_of_squares
        self.minimum = _pick(self.minimum, other.minimum, min)
        self.maximum = _pick(self.maximum, other.maximum, max)
        self.first_seen = _pick(self.first_seen, other.first_seen, min)
        self.last_seen = _pick(self.last_seen, other.last_seen, max)

    def copy(self) -> "LabelMonitor":
        return LabelMonitor(
            label=self.label,
            unit=self.unit,
            histogram=self.histogram.copy(),
            count=self.count,
            total=self.total,
            sum_of_squares=self.sum_of_squares,
            minimum=self.minimum,
            maximum=self.maximum,
            first_seen=self.first_seen,
            last_seen=self.last_seen,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe snapshot; timestamps are ISO 8601 strings."""
        return {
            "label": self.label,
            "unit": self.unit,
            "count": self.count,
            "total": self.total,
            "mean": self.mean,
            "stdev": self.stdev,
            "min": self.minimum,
            "max": self.maximum,
            "first_seen": self.first_seen.isoformat() if self.first_seen else None,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
            "histogram": self.histogram.as_dict(),
        }


def _pick(current, candidate, choose):
    if current is None:
        return candidate
    if candidate is None:
        return current
    return choose(current, candidate)
