"""Utilities for building CLI artifact output paths.

Artifacts produced next to the HTML report share its file stem:
``report.html`` comes with ``report.results.json``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


def report_prefix_from_path(report_path: Path) -> str:
    """Return the stem used to name artifacts that accompany a report."""
    return report_path.stem


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory exists for a file path."""
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_override_path(override: Optional[Path], base_dir: Path) -> Optional[Path]:
    """Resolve a user supplied artifact path.

    Absolute paths are returned unchanged; relative paths are interpreted
    relative to ``base_dir``.
    """
    if override is None:
        return None
    if override.is_absolute():
        return override
    return base_dir / override


def results_path_for_report(report_path: Path, results_override: Optional[Path]) -> Path:
    """Determine where the JSON results of a ``report`` run go.

    Behavior:
    - An explicit ``results_override`` wins; relative values are taken
      relative to the current working directory.
    - Otherwise ``<report dir>/<report stem>.results.json``.
    """
    resolved = resolve_override_path(results_override, Path.cwd())
    if resolved is not None:
        return resolved
    prefix = report_prefix_from_path(report_path)
    return report_path.parent / f"{prefix}.results.json"
