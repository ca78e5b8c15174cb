"""Fixed-boundary bucket histograms.

A :class:`BucketSpec` describes ascending upper bounds with a label per
bucket plus a catch-all overflow bucket. A :class:`Histogram` counts values
against one spec. A value equal to a bound belongs to that bound's bucket,
so 10 ms is counted in ``0-10ms`` and 10.0001 ms in ``10-20ms``.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class BucketSpec:
    """Immutable bucket layout.

    Attributes:
        name: Short identifier, e.g. ``"ms"``.
        bounds: Ascending upper bounds.
        labels: One label per bound.
        overflow_label: Label of the bucket for values above every bound.
    """

    name: str
    bounds: Tuple[float, ...]
    labels: Tuple[str, ...]
    overflow_label: str

    def __post_init__(self) -> None:
        if len(self.bounds) != len(self.labels):
            raise ValueError(
                f"Bucket spec '{self.name}' has {len(self.bounds)} bounds "
                f"but {len(self.labels)} labels"
            )
        if any(hi <= lo for lo, hi in zip(self.bounds, self.bounds[1:])):
            raise ValueError(f"Bucket bounds of '{self.name}' must be strictly ascending")

    @classmethod
    def doubling(cls, name: str, unit: str, first: int, steps: int) -> "BucketSpec":
        """Build a spec whose bounds double from ``first``: first, 2*first, ...

        Labels read ``"0-10ms"``, ``"10-20ms"`` and the overflow label
        ``"≥<last><unit>"``.
        """
        bounds: List[int] = [first * (2**i) for i in range(steps)]
        lows = [0] + bounds[:-1]
        labels = tuple(f"{lo}-{hi}{unit}" for lo, hi in zip(lows, bounds))
        return cls(
            name=name,
            bounds=tuple(float(b) for b in bounds),
            labels=labels,
            overflow_label=f"≥{bounds[-1]}{unit}",
        )

    @property
    def all_labels(self) -> Tuple[str, ...]:
        """Bucket labels including the overflow bucket."""
        return self.labels + (self.overflow_label,)

    def index_of(self, value: float) -> int:
        """Return the bucket index for ``value``; ``len(bounds)`` is overflow."""
        return bisect_left(self.bounds, value)


#: Latency buckets: 10, 20, 40 ... 20480 ms.
MS_BUCKETS = BucketSpec.doubling("ms", "ms", 10, 12)

#: Payload size buckets: 1, 2, 4 ... 2048 KB.
KB_BUCKETS = BucketSpec.doubling("kb", "kb", 1, 12)


@dataclass
class Histogram:
    """Bucket counters over one :class:`BucketSpec`."""

    spec: BucketSpec = MS_BUCKETS
    counts: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        size = len(self.spec.bounds) + 1
        if not self.counts:
            self.counts = [0] * size
        elif len(self.counts) != size:
            raise ValueError(
                f"Histogram '{self.spec.name}' expects {size} counters, got {len(self.counts)}"
            )

    def observe(self, value: float) -> int:
        """Count ``value`` in its bucket and return the bucket index."""
        index = self.spec.index_of(value)
        self.counts[index] += 1
        return index

    @property
    def total(self) -> int:
        """Number of values observed."""
        return sum(self.counts)

    def merge(self, other: "Histogram") -> None:
        """Add ``other``'s counters to this histogram.

        Raises:
            ValueError: If the two histograms use different bounds.
        """
        if other.spec.bounds != self.spec.bounds:
            raise ValueError(
                f"Cannot merge histogram '{other.spec.name}' into '{self.spec.name}': "
                "bucket bounds differ"
            )
        self.counts = [a + b for a, b in zip(self.counts, other.counts)]

    def copy(self) -> "Histogram":
        return Histogram(spec=self.spec, counts=list(self.counts))

    def as_dict(self) -> Dict[str, int]:
        """Ordered mapping of bucket label to count."""
        return dict(zip(self.spec.all_labels, self.counts))

    def items(self) -> Sequence[Tuple[str, int]]:
        return list(zip(self.spec.all_labels, self.counts))
