"""Store of label monitors keyed by (label, unit)."""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from jtlreport.model.histogram import KB_BUCKETS, MS_BUCKETS, BucketSpec
from jtlreport.model.monitor import (
    UNIT_EXCEPTION,
    UNIT_JMETER_ERRORS,
    UNIT_KB,
    UNIT_MS,
    LabelMonitor,
)

#: Bucket layout used for each unit's histograms.
DEFAULT_UNIT_BUCKETS: Dict[str, BucketSpec] = {
    UNIT_MS: MS_BUCKETS,
    UNIT_KB: KB_BUCKETS,
    UNIT_JMETER_ERRORS: MS_BUCKETS,
    UNIT_EXCEPTION: MS_BUCKETS,
}

MonitorKey = Tuple[str, str]


class MonitorRegistry:
    """Lazily populated mapping from ``(label, unit)`` to :class:`LabelMonitor`.

    One registry belongs to one aggregation run. Monitors are created on
    first access and never removed. Iteration follows creation order.
    """

    def __init__(self, unit_buckets: Optional[Mapping[str, BucketSpec]] = None) -> None:
        self._unit_buckets: Dict[str, BucketSpec] = dict(
            DEFAULT_UNIT_BUCKETS if unit_buckets is None else unit_buckets
        )
        self._monitors: Dict[MonitorKey, LabelMonitor] = {}

    def bucket_spec(self, unit: str) -> BucketSpec:
        """Bucket layout for ``unit``; unknown units fall back to ms buckets."""
        return self._unit_buckets.get(unit, MS_BUCKETS)

    def get_or_create(self, label: str, unit: str) -> LabelMonitor:
        """Return the monitor for ``(label, unit)``, creating an empty one if needed."""
        key = (label, unit)
        monitor = self._monitors.get(key)
        if monitor is None:
            monitor = LabelMonitor.empty(label, unit, self.bucket_spec(unit))
            self._monitors[key] = monitor
        return monitor

    def get(self, label: str, unit: str) -> Optional[LabelMonitor]:
        return self._monitors.get((label, unit))

    def all(self) -> Iterator[LabelMonitor]:
        """Iterate over every monitor in creation order."""
        return iter(list(self._monitors.values()))

    def by_unit(self, unit: str) -> List[LabelMonitor]:
        """Monitors tracking ``unit``, in creation order."""
        return [m for m in self._monitors.values() if m.unit == unit]

    def labels(self, unit: str) -> List[str]:
        return [m.label for m in self.by_unit(unit)]

    def merge(self, other: "MonitorRegistry") -> None:
        """Fold every monitor of ``other`` into this registry.

        Monitors missing here are copied, never shared, so ``other`` stays
        independent of this registry afterwards.
        """
        for key, monitor in other._monitors.items():
            existing = self._monitors.get(key)
            if existing is None:
                self._monitors[key] = monitor.copy()
            else:
                existing.merge(monitor)

    def __len__(self) -> int:
        return len(self._monitors)

    def __contains__(self, key: object) -> bool:
        return key in self._monitors

    def __repr__(self) -> str:
        return f"MonitorRegistry(monitors={len(self._monitors)})"
