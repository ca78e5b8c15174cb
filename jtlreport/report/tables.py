"""Tabular views over a monitor registry.

The report writer, the JSON export and the console summary all read the
registry through these helpers, which return pandas DataFrames (one row per
monitor) or plain dictionaries for run-wide figures.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from jtlreport.model.monitor import UNIT_EXCEPTION, UNIT_MS, LabelMonitor
from jtlreport.model.registry import MonitorRegistry

#: Statistic columns of :func:`monitor_frame`, in display order.
STAT_COLUMNS: List[str] = [
    "label",
    "requests",
    "avg",
    "total",
    "stdev",
    "min",
    "max",
    "first_seen",
    "last_seen",
]


def _monitor_row(monitor: LabelMonitor, with_histogram: bool) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "label": monitor.label,
        "requests": monitor.count,
        "avg": monitor.mean,
        "total": monitor.total,
        "stdev": monitor.stdev,
        "min": monitor.minimum,
        "max": monitor.maximum,
        "first_seen": monitor.first_seen,
        "last_seen": monitor.last_seen,
    }
    if with_histogram:
        row.update(monitor.histogram.as_dict())
    return row


def monitor_frame(
    registry: MonitorRegistry, unit: str, with_histogram: bool = True
) -> pd.DataFrame:
    """One row per monitor of ``unit`` with statistics and bucket counts.

    Args:
        registry: Source registry.
        unit: Unit to select.
        with_histogram: Append one column per histogram bucket.

    Returns:
        DataFrame with :data:`STAT_COLUMNS` (plus bucket labels); empty, but
        with the same columns, when the unit has no monitors.
    """
    columns = list(STAT_COLUMNS)
    if with_histogram:
        columns += list(registry.bucket_spec(unit).all_labels)
    rows = [_monitor_row(m, with_histogram) for m in registry.by_unit(unit)]
    return pd.DataFrame(rows, columns=columns)


def sort_frame(frame: pd.DataFrame, sort_by: str = "first_seen", order: str = "asc") -> pd.DataFrame:
    """Sort by ``sort_by`` then label, keeping ties stable.

    Raises:
        ValueError: If ``sort_by`` is not a column or ``order`` is not asc/desc.
    """
    if sort_by not in frame.columns:
        raise ValueError(f"Unknown sort column: {sort_by}")
    if order not in ("asc", "desc"):
        raise ValueError(f"Sort order must be 'asc' or 'desc', got {order!r}")
    if frame.empty:
        return frame
    keys = [sort_by] if sort_by == "label" else [sort_by, "label"]
    ascending = [order == "asc"] + [True] * (len(keys) - 1)
    return frame.sort_values(by=keys, ascending=ascending, kind="mergesort").reset_index(
        drop=True
    )


def failures_by_label(registry: MonitorRegistry) -> Dict[str, int]:
    """Number of failed requests per request label."""
    return {m.label: m.count for m in registry.by_unit(UNIT_EXCEPTION)}


def summarize(registry: MonitorRegistry) -> Dict[str, Any]:
    """Run-wide figures over the ``ms.`` and ``Exception`` monitors.

    Returns:
        Dictionary with ``requests``, ``failures``, ``success_rate`` (percent),
        ``average_time``, ``min_time``, ``max_time`` (ms), ``first_request``,
        ``last_request`` and ``duration_seconds``. Time figures are None when
        nothing was recorded.
    """
    frame = monitor_frame(registry, UNIT_MS, with_histogram=False)
    requests = int(frame["requests"].sum()) if not frame.empty else 0
    failures = sum(failures_by_label(registry).values())

    if not requests:
        return {
            "requests": 0,
            "failures": failures,
            "success_rate": 100.0,
            "average_time": None,
            "min_time": None,
            "max_time": None,
            "first_request": None,
            "last_request": None,
            "duration_seconds": 0.0,
        }

    monitors = registry.by_unit(UNIT_MS)
    first_request = min(m.first_seen for m in monitors if m.first_seen is not None)
    last_request = max(m.last_seen for m in monitors if m.last_seen is not None)
    return {
        "requests": requests,
        "failures": failures,
        "success_rate": 100.0 - failures * 100.0 / requests,
        "average_time": float(frame["total"].sum()) / requests,
        "min_time": float(frame["min"].min()),
        "max_time": float(frame["max"].max()),
        "first_request": first_request,
        "last_request": last_request,
        "duration_seconds": (last_request - first_request).total_seconds(),
    }
